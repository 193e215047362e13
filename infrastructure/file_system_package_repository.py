import binascii
import logging
import os
import threading
import uuid
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

from domain.crypto_hash_provider import CryptoHashProvider
from domain.hash_constants import BLOCK_SIZE
from domain.package_repository import PackageRepository
from domain.packaging_constants import HASH_FILE_EXTENSION
from domain.version_folder_path_resolver import VersionFolderPathResolver

logger = logging.getLogger(__name__)


class FileSystemPackageRepository(PackageRepository):
    def __init__(
        self,
        packages_dir: Path,
        hash_provider: Optional[CryptoHashProvider] = None,
        lowercase: bool = True
    ):
        self.packages_dir = Path(packages_dir)
        self.packages_dir.mkdir(parents=True, exist_ok=True)

        self.hash_provider = hash_provider or CryptoHashProvider()
        self.path_resolver = VersionFolderPathResolver(self.packages_dir, lowercase=lowercase)
        self._lock = threading.RLock()

    def save_package(
        self,
        package_id: str,
        version: str,
        content: Union[bytes, BinaryIO],
        manifest_content: Optional[bytes] = None
    ) -> str:
        """Write the archive through a temp file, then its hash sidecar."""
        resolver = self.path_resolver
        install_path = resolver.get_install_path(package_id, version)
        package_path = resolver.get_package_file_path(package_id, version)
        hash_path = resolver.get_hash_path(package_id, version)

        with self._lock:
            install_path.mkdir(parents=True, exist_ok=True)
            temp_path = install_path / f"{uuid.uuid4().hex}.tmp"
            temp_hash_path = install_path / f"{uuid.uuid4().hex}.tmp"

            try:
                with open(temp_path, "w+b") as package_stream:
                    self._copy_content(content, package_stream)
                    package_stream.seek(0)
                    digest = self.hash_provider.calculate_stream_hash(package_stream)

                encoded_hash = self.hash_provider.encode_hash(digest)
                temp_hash_path.write_text(encoded_hash, encoding="ascii")

                os.replace(temp_path, package_path)
                try:
                    os.replace(temp_hash_path, hash_path)
                except OSError:
                    # A sidecar for the previous bytes must not outlive them
                    if hash_path.exists():
                        hash_path.unlink()
                    raise
            finally:
                for path in (temp_path, temp_hash_path):
                    if path.exists():
                        path.unlink()

            if manifest_content is not None:
                resolver.get_manifest_file_path(package_id, version).write_bytes(manifest_content)

        logger.info("Stored %s %s at %s", package_id, version, package_path)
        return encoded_hash

    @staticmethod
    def _copy_content(content: Union[bytes, BinaryIO], dst: BinaryIO) -> None:
        if isinstance(content, (bytes, bytearray, memoryview)):
            dst.write(content)
            return

        while True:
            chunk = content.read(BLOCK_SIZE)
            if not chunk:
                break
            dst.write(chunk)

    def read_hash(self, package_id: str, version: str) -> Optional[str]:
        hash_path = self.path_resolver.get_hash_path(package_id, version)
        with self._lock:
            if not hash_path.is_file():
                return None
            return hash_path.read_text(encoding="ascii").strip()

    def has_package(self, package_id: str, version: str) -> bool:
        return (
            self.path_resolver.get_package_file_path(package_id, version).is_file()
            and self.path_resolver.get_hash_path(package_id, version).is_file()
        )

    def verify_package(self, package_id: str, version: str) -> bool:
        """Serialized with save_package so a rewrite in progress is never observed."""
        with self._lock:
            if not self.has_package(package_id, version):
                return False

            encoded_hash = self.read_hash(package_id, version)
            if encoded_hash is None:
                return False

            try:
                expected = self.hash_provider.decode_hash(encoded_hash)
            except (binascii.Error, ValueError) as e:
                logger.warning("Unreadable hash file for %s %s: %s", package_id, version, e)
                return False

            package_path = self.path_resolver.get_package_file_path(package_id, version)
            with open(package_path, "rb") as f:
                actual = self.hash_provider.calculate_stream_hash(f)

        if actual != expected:
            logger.warning("Hash mismatch for %s %s", package_id, version)
            return False
        return True

    def list_versions(self, package_id: str) -> List[str]:
        version_list_path = self.path_resolver.get_version_list_path(package_id)
        if not version_list_path.is_dir():
            return []

        versions = []
        for entry in version_list_path.iterdir():
            if entry.is_dir() and self.has_package(package_id, entry.name):
                versions.append(entry.name)
        return sorted(versions)

    def mark_downloaded(self, package_id: str) -> Path:
        marker_path = self.path_resolver.get_package_download_marker_path(package_id)
        marker_path.parent.mkdir(parents=True, exist_ok=True)
        marker_path.touch()
        return marker_path

    def is_marked_downloaded(self, package_id: str) -> bool:
        return self.path_resolver.get_package_download_marker_path(package_id).is_file()

    def get_package_file_path(self, package_id: str, version: str) -> Optional[Path]:
        package_path = self.path_resolver.get_package_file_path(package_id, version)
        if package_path.is_file():
            return package_path
        return None

    def get_cache_stats(self) -> Dict[str, Any]:
        """Get statistics about the packages folder."""
        package_ids = set()
        total_versions = 0
        cache_size_bytes = 0

        for path in self.packages_dir.rglob("*"):
            if path.is_file():
                cache_size_bytes += path.stat().st_size

        for hash_file in self.packages_dir.rglob(f"*{HASH_FILE_EXTENSION}"):
            # <id>/<version>/<id>.<version>.nupkg.sha512
            version_dir = hash_file.parent
            package_ids.add(version_dir.parent.name)
            total_versions += 1

        return {
            "total_packages": len(package_ids),
            "total_versions": total_versions,
            "cache_size_bytes": cache_size_bytes
        }
