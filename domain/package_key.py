"""Domain model for the (package id, version) pair."""

from dataclasses import dataclass


class InvalidPackageKeyError(ValueError):
    """Raised when a package id or version is empty or blank."""


def require_non_blank(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidPackageKeyError(f"{field_name} must be a non-empty string")
    return value


@dataclass(frozen=True)
class PackageKey:
    """Identifies a package by id and version."""
    package_id: str
    version: str

    def __post_init__(self):
        require_non_blank(self.package_id, "package_id")
        require_non_blank(self.version, "version")

    def __str__(self) -> str:
        return f"{self.package_id} {self.version}"
