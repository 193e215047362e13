from pathlib import Path
from typing import Optional, Union

from .package_key import require_non_blank
from .package_layout import PackageLayout, VersionFolderLayout
from .packaging_constants import HASH_FILE_EXTENSION, PACKAGE_DOWNLOAD_MARKER_FILE_EXTENSION


class VersionFolderPathResolver:
    """
    Maps a package id and version to the paths of a local packages folder.

    Every method is a pure function of the root path, the lowercase flag and
    its arguments. Nothing touches the file system.
    """

    def __init__(
        self,
        root_path: Union[str, Path],
        lowercase: bool = True,
        layout: Optional[PackageLayout] = None
    ):
        self._root_path = root_path
        self._lowercase = lowercase
        self._layout = layout or VersionFolderLayout()

    @property
    def root_path(self) -> Union[str, Path]:
        return self._root_path

    @property
    def is_lowercase(self) -> bool:
        return self._lowercase

    @property
    def layout(self) -> PackageLayout:
        return self._layout

    def normalize_id(self, package_id: str) -> str:
        require_non_blank(package_id, "package_id")
        return package_id.lower() if self._lowercase else package_id

    def normalize_version(self, version: str) -> str:
        """
        Versions are opaque tokens: "1.0" and "1.0.0" are different folders.
        """
        require_non_blank(version, "version")
        return version.lower() if self._lowercase else version

    def get_version_list_directory(self, package_id: str) -> str:
        return self._layout.get_version_list_directory(self.normalize_id(package_id))

    def get_version_list_path(self, package_id: str) -> Path:
        return Path(self._root_path) / self.get_version_list_directory(package_id)

    def get_package_directory(self, package_id: str, version: str) -> str:
        return self._layout.get_package_directory(
            self.normalize_id(package_id),
            self.normalize_version(version)
        )

    def get_install_path(self, package_id: str, version: str) -> Path:
        return self._layout.get_install_path(
            self._root_path,
            self.normalize_id(package_id),
            self.normalize_version(version)
        )

    def get_package_file_name(self, package_id: str, version: str) -> str:
        return self._layout.get_package_file_name(
            self.normalize_id(package_id),
            self.normalize_version(version)
        )

    def get_package_file_path(self, package_id: str, version: str) -> Path:
        return self.get_install_path(package_id, version) / self.get_package_file_name(package_id, version)

    def get_manifest_file_name(self, package_id: str, version: str) -> str:
        return self._layout.get_manifest_file_name(
            self.normalize_id(package_id),
            self.normalize_version(version)
        )

    def get_manifest_file_path(self, package_id: str, version: str) -> Path:
        package_id = self.normalize_id(package_id)
        return self.get_install_path(package_id, version) / self.get_manifest_file_name(package_id, version)

    def get_hash_file_name(self, package_id: str, version: str) -> str:
        # The extension stays .nupkg.sha512 whatever algorithm produced the digest
        return f"{self.normalize_id(package_id)}.{self.normalize_version(version)}{HASH_FILE_EXTENSION}"

    def get_hash_path(self, package_id: str, version: str) -> Path:
        return self.get_install_path(package_id, version) / self.get_hash_file_name(package_id, version)

    def get_package_download_marker_file_name(self, package_id: str) -> str:
        return f"{self.normalize_id(package_id)}{PACKAGE_DOWNLOAD_MARKER_FILE_EXTENSION}"

    def get_package_download_marker_path(self, package_id: str) -> Path:
        return self.get_version_list_path(package_id) / self.get_package_download_marker_file_name(package_id)
