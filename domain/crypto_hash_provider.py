import base64
import hashlib
from typing import BinaryIO, Optional

from .hash_algorithm import HashAlgorithmName
from .hash_constants import BLOCK_SIZE, DEFAULT_HASH_ALGORITHM


class UnsupportedHashAlgorithmError(ValueError):
    """Raised when a hash algorithm outside the vetted list is requested."""

    def __init__(self, algorithm: str):
        super().__init__(f"Unsupported hash algorithm: '{algorithm}'")
        self.algorithm = algorithm


class CryptoHashProvider:
    """
    Calculates and verifies package digests with a single vetted algorithm.

    The algorithm is fixed at construction. When no algorithm is given,
    SHA512 is assumed. Only SHA256 and SHA512 are accepted (case-insensitive).
    """

    def __init__(self, hash_algorithm: Optional[str] = None):
        if not hash_algorithm:
            hash_algorithm = DEFAULT_HASH_ALGORITHM

        algorithm = HashAlgorithmName.parse(hash_algorithm)
        if not algorithm.is_supported:
            raise UnsupportedHashAlgorithmError(hash_algorithm)

        self._hash_algorithm = algorithm

    @property
    def hash_algorithm(self) -> HashAlgorithmName:
        return self._hash_algorithm

    def _new_hasher(self):
        return hashlib.new(self._hash_algorithm.hashlib_name)

    def calculate_hash(self, data: bytes) -> bytes:
        """Calculates the hash for a byte sequence."""
        hasher = self._new_hasher()
        hasher.update(data)
        return hasher.digest()

    def calculate_stream_hash(self, stream: BinaryIO) -> bytes:
        """
        Calculates the hash for a stream, from its current position to the end.

        The stream is consumed and is not rewound; callers position it first.
        """
        hasher = self._new_hasher()
        while True:
            chunk = stream.read(BLOCK_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
        return hasher.digest()

    def verify_hash(self, data: bytes, expected_hash: bytes) -> bool:
        """Verifies the hash for the given data and hash."""
        return self.calculate_hash(data) == bytes(expected_hash)

    @staticmethod
    def encode_hash(digest: bytes) -> str:
        """Base64 text of a digest, as stored in the hash sidecar file."""
        return base64.b64encode(digest).decode("ascii")

    @staticmethod
    def decode_hash(encoded: str) -> bytes:
        return base64.b64decode(encoded.strip(), validate=True)
