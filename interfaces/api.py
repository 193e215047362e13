import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from application.dtos import PackageRequest
from application.materialize_package import MaterializePackage
from domain.crypto_hash_provider import CryptoHashProvider
from domain.hash_constants import BLOCK_SIZE
from domain.package_key import PackageKey
from infrastructure.file_system_package_repository import FileSystemPackageRepository

logger = logging.getLogger(__name__)


class Config:
    def __init__(
        self,
        packages_dir: str,
        hash_algorithm: Optional[str] = None,
        lowercase: bool = True,
        base_url: str = "http://localhost:8000"
    ):
        self.packages_dir = packages_dir
        self.hash_algorithm = hash_algorithm
        self.lowercase = lowercase
        self.base_url = base_url.rstrip('/')


class PackageResponseDTO(BaseModel):
    hash: str = Field(..., description="Base64-encoded package digest")
    hash_algorithm: str = Field(..., description="Algorithm that produced the digest")
    cache_hit: bool = Field(..., description="Whether an intact copy was already stored")
    download_url: str = Field(..., description="URL to download the package archive")


class HashResponseDTO(BaseModel):
    hash: str


class VerifyResponseDTO(BaseModel):
    valid: bool


class VersionsResponseDTO(BaseModel):
    package_id: str
    versions: List[str]


config: Optional[Config] = None
hash_provider: Optional[CryptoHashProvider] = None
package_repository: Optional[FileSystemPackageRepository] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global package_repository
    if config and hash_provider:
        package_repository = FileSystemPackageRepository(
            Path(config.packages_dir),
            hash_provider=hash_provider,
            lowercase=config.lowercase
        )
    yield


app = FastAPI(
    title="Package Hash Store",
    description="Local package folder with hash sidecar files",
    version="1.0.0",
    lifespan=lifespan
)


def _require_repository() -> FileSystemPackageRepository:
    if not config or not package_repository:
        raise HTTPException(status_code=500, detail="Server not properly configured")
    return package_repository


def _require_key(package_id: str, version: str) -> PackageKey:
    try:
        return PackageKey(package_id, version)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/v1/packages/{package_id}/{version}", response_model=PackageResponseDTO)
async def store_package(package_id: str, version: str, request: Request):
    """
    Store a package archive sent as the raw request body.

    The archive is hashed, written to its install path and the hash sidecar
    is (re)written. An intact copy already on disk is reported as a cache hit.
    """
    repository = _require_repository()
    key = _require_key(package_id, version)

    content = await request.body()
    if not content:
        raise HTTPException(status_code=400, detail="Request body must contain the package archive")

    handler = MaterializePackage(repository, repository.path_resolver, repository.hash_provider)
    try:
        response = handler.handle(PackageRequest(key.package_id, key.version, content))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to store %s", key)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return PackageResponseDTO(
        hash=response.hash,
        hash_algorithm=repository.hash_provider.hash_algorithm.name,
        cache_hit=response.is_cache_hit,
        download_url=f"{config.base_url}/download/{response.package_id}/{response.version}"
    )


@app.get("/v1/packages/{package_id}/versions", response_model=VersionsResponseDTO)
async def list_versions(package_id: str):
    repository = _require_repository()
    try:
        versions = repository.list_versions(package_id)
        normalized_id = repository.path_resolver.normalize_id(package_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VersionsResponseDTO(package_id=normalized_id, versions=versions)


@app.get("/v1/packages/{package_id}/{version}/hash", response_model=HashResponseDTO)
async def get_hash(package_id: str, version: str):
    repository = _require_repository()
    key = _require_key(package_id, version)

    encoded_hash = repository.read_hash(key.package_id, key.version)
    if encoded_hash is None:
        raise HTTPException(status_code=404, detail="Package not found")
    return HashResponseDTO(hash=encoded_hash)


@app.get("/v1/packages/{package_id}/{version}/verify", response_model=VerifyResponseDTO)
async def verify_package(package_id: str, version: str):
    repository = _require_repository()
    key = _require_key(package_id, version)

    if not repository.has_package(key.package_id, key.version):
        raise HTTPException(status_code=404, detail="Package not found")
    return VerifyResponseDTO(valid=repository.verify_package(key.package_id, key.version))


@app.get("/download/{package_id}/{version}")
async def download_package(package_id: str, version: str):
    """Stream a stored package archive."""
    repository = _require_repository()
    key = _require_key(package_id, version)

    package_path = repository.get_package_file_path(key.package_id, key.version)
    if not package_path:
        raise HTTPException(status_code=404, detail="Package not found")

    def iterfile():
        with open(package_path, 'rb') as f:
            while chunk := f.read(BLOCK_SIZE):
                yield chunk

    return StreamingResponse(
        iterfile(),
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename={package_path.name}"
        }
    )


@app.get("/v1/stats")
async def cache_stats():
    return _require_repository().get_cache_stats()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def initialize_app(
    packages_dir: str,
    hash_algorithm: Optional[str] = None,
    lowercase: bool = True,
    base_url: str = "http://localhost:8000"
):
    """Initialize the FastAPI application with configuration."""
    global config, hash_provider

    # Fails fast on an unsupported algorithm, before the server starts
    hash_provider = CryptoHashProvider(hash_algorithm)

    config = Config(
        packages_dir=packages_dir,
        hash_algorithm=hash_algorithm,
        lowercase=lowercase,
        base_url=base_url
    )

    Path(packages_dir).mkdir(parents=True, exist_ok=True)

    return app
