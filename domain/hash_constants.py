"""Hash constants for the package hash store."""

DEFAULT_HASH_ALGORITHM = "SHA512"
SUPPORTED_HASH_ALGORITHMS = ("SHA256", "SHA512")
BLOCK_SIZE = 8192  # 8KB block size for stream processing
