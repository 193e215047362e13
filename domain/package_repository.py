from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union


class PackageRepository(ABC):
    """
    Abstract repository interface for a local packages folder.

    This interface defines the contract for materializing package archives
    together with their hash sidecar files, and for checking them later.
    """

    @abstractmethod
    def save_package(
        self,
        package_id: str,
        version: str,
        content: Union[bytes, BinaryIO],
        manifest_content: Optional[bytes] = None
    ) -> str:
        """
        Store a package archive in the packages folder.

        This should:
        1. Write the archive into the install path of the package version
        2. Hash the written bytes and (re)write the hash sidecar file
        3. Write the manifest next to the archive when one is given

        Args:
            package_id: The package id
            version: The package version
            content: The archive bytes or a readable binary stream
            manifest_content: Optional manifest bytes, stored verbatim

        Returns:
            The base64-encoded digest written to the sidecar file

        Raises:
            OSError: If storage operations fail
        """
        pass

    @abstractmethod
    def read_hash(self, package_id: str, version: str) -> Optional[str]:
        """
        Read the base64 digest from the hash sidecar file.

        Returns:
            The sidecar content, or None if the file does not exist
        """
        pass

    @abstractmethod
    def has_package(self, package_id: str, version: str) -> bool:
        """
        Check if both the archive and its hash sidecar exist.
        """
        pass

    @abstractmethod
    def verify_package(self, package_id: str, version: str) -> bool:
        """
        Recompute the archive digest and compare it to the sidecar.

        Returns:
            True if the sidecar reflects the current archive bytes, False if
            either file is missing, the sidecar is unreadable, or they differ
        """
        pass

    @abstractmethod
    def list_versions(self, package_id: str) -> List[str]:
        """
        List the versions of a package that have a complete archive and sidecar.
        """
        pass

    @abstractmethod
    def mark_downloaded(self, package_id: str) -> Path:
        """
        Write the package download marker file and return its path.
        """
        pass

    @abstractmethod
    def is_marked_downloaded(self, package_id: str) -> bool:
        pass

    @abstractmethod
    def get_package_file_path(self, package_id: str, version: str) -> Optional[Path]:
        """
        Get the path to a package archive if it exists.
        """
        pass

    @abstractmethod
    def get_cache_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the packages folder.

        Returns:
            Dictionary containing:
            - total_packages: Number of package ids with at least one version
            - total_versions: Number of complete package versions
            - cache_size_bytes: Total size of all files in the folder
        """
        pass
