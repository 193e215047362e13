import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from .packaging_constants import NUPKG_EXTENSION, NUSPEC_EXTENSION


class PackageLayout(ABC):
    """
    Strategy deciding where package versions live under a packages folder.

    All methods receive a package id and version that have already been
    normalized by the resolver, so implementations must not change case.
    """

    @abstractmethod
    def get_version_list_directory(self, package_id: str) -> str:
        """
        Directory, relative to the root, holding every version of a package.

        Args:
            package_id: The normalized package id
        """
        pass

    @abstractmethod
    def get_package_directory(self, package_id: str, version: str) -> str:
        """
        Directory, relative to the root, holding a single package version.

        Args:
            package_id: The normalized package id
            version: The normalized version
        """
        pass

    @abstractmethod
    def get_package_file_name(self, package_id: str, version: str) -> str:
        """File name of the package archive inside the package directory."""
        pass

    @abstractmethod
    def get_manifest_file_name(self, package_id: str, version: str) -> str:
        """File name of the manifest inside the package directory."""
        pass

    def get_install_path(self, root_path: Union[str, Path], package_id: str, version: str) -> Path:
        return Path(root_path) / self.get_package_directory(package_id, version)


class VersionFolderLayout(PackageLayout):
    """Default layout: <id>/<version>/<id>.<version>.nupkg and <id>.nuspec."""

    def get_version_list_directory(self, package_id: str) -> str:
        return package_id

    def get_package_directory(self, package_id: str, version: str) -> str:
        return os.path.join(self.get_version_list_directory(package_id), version)

    def get_package_file_name(self, package_id: str, version: str) -> str:
        return f"{package_id}.{version}{NUPKG_EXTENSION}"

    def get_manifest_file_name(self, package_id: str, version: str) -> str:
        # Manifest names never embed the version
        return f"{package_id}{NUSPEC_EXTENSION}"
