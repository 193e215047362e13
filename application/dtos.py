from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class PackageRequest:
    package_id: str
    version: str
    content: bytes
    manifest_content: Optional[bytes] = None


@dataclass
class PackageResponse:
    package_id: str
    version: str
    hash: str
    package_path: Path
    hash_path: Path
    is_cache_hit: bool
