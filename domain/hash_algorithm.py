from enum import Enum

from .hash_constants import SUPPORTED_HASH_ALGORITHMS


class HashAlgorithmName(Enum):
    UNKNOWN = 0
    SHA256 = 1
    SHA384 = 2  # reserved, never accepted by CryptoHashProvider
    SHA512 = 3

    @classmethod
    def parse(cls, name: str) -> "HashAlgorithmName":
        """Case-insensitive lookup; unrecognized names map to UNKNOWN."""
        try:
            return cls[name.upper()]
        except KeyError:
            return cls.UNKNOWN

    @property
    def is_supported(self) -> bool:
        return self.name in SUPPORTED_HASH_ALGORITHMS

    @property
    def hashlib_name(self) -> str:
        return self.name.lower()
