import logging

from domain.crypto_hash_provider import CryptoHashProvider
from domain.package_key import PackageKey
from domain.package_repository import PackageRepository
from domain.version_folder_path_resolver import VersionFolderPathResolver
from application.dtos import PackageRequest, PackageResponse

logger = logging.getLogger(__name__)


class MaterializePackage:
    """Orchestrates writing a package archive and its hash sidecar."""

    def __init__(
        self,
        repository: PackageRepository,
        path_resolver: VersionFolderPathResolver,
        hash_provider: CryptoHashProvider
    ):
        self.repository = repository
        self.path_resolver = path_resolver
        self.hash_provider = hash_provider

    def handle(self, request: PackageRequest) -> PackageResponse:
        """Store the package unless an intact copy of the same bytes is already present."""
        key = PackageKey(request.package_id, request.version)
        request_hash = self.hash_provider.encode_hash(self.hash_provider.calculate_hash(request.content))

        if self._is_cache_hit(key, request, request_hash):
            logger.debug("Cache hit for %s", key)
            return self._response(key, request_hash, is_cache_hit=True)

        if self.repository.has_package(key.package_id, key.version):
            logger.warning("Stored copy of %s is stale or differs from the request, rewriting package", key)

        encoded_hash = self.repository.save_package(
            key.package_id,
            key.version,
            request.content,
            manifest_content=request.manifest_content
        )
        self.repository.mark_downloaded(key.package_id)

        return self._response(key, encoded_hash, is_cache_hit=False)

    def _is_cache_hit(self, key: PackageKey, request: PackageRequest, request_hash: str) -> bool:
        if not self.repository.verify_package(key.package_id, key.version):
            return False

        if self.repository.read_hash(key.package_id, key.version) != request_hash:
            return False

        if request.manifest_content is not None:
            manifest_path = self.path_resolver.get_manifest_file_path(key.package_id, key.version)
            if not manifest_path.is_file() or manifest_path.read_bytes() != request.manifest_content:
                return False

        return True

    def _response(self, key: PackageKey, encoded_hash: str, is_cache_hit: bool) -> PackageResponse:
        return PackageResponse(
            package_id=self.path_resolver.normalize_id(key.package_id),
            version=self.path_resolver.normalize_version(key.version),
            hash=encoded_hash,
            package_path=self.path_resolver.get_package_file_path(key.package_id, key.version),
            hash_path=self.path_resolver.get_hash_path(key.package_id, key.version),
            is_cache_hit=is_cache_hit
        )
