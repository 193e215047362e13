import base64
import hashlib
import io
import pytest

from domain.crypto_hash_provider import CryptoHashProvider, UnsupportedHashAlgorithmError
from domain.hash_algorithm import HashAlgorithmName


class TestCryptoHashProvider:
    @pytest.fixture
    def provider(self):
        return CryptoHashProvider()

    def test_default_algorithm_is_sha512(self, provider):
        assert provider.hash_algorithm is HashAlgorithmName.SHA512
        assert len(provider.calculate_hash(b"content")) == 64

    def test_empty_name_defaults_to_sha512(self):
        assert CryptoHashProvider("").hash_algorithm is HashAlgorithmName.SHA512

    def test_sha256_digest_length(self):
        assert len(CryptoHashProvider("SHA256").calculate_hash(b"content")) == 32

    def test_algorithm_name_is_case_insensitive(self):
        lower = CryptoHashProvider("sha256")
        upper = CryptoHashProvider("SHA256")

        assert lower.hash_algorithm is HashAlgorithmName.SHA256
        assert lower.calculate_hash(b"content") == upper.calculate_hash(b"content")

    @pytest.mark.parametrize("name", [
        "MD5", "SHA1", "SHA384", "sha3_256", "UNKNOWN", "SHA-512",
        " SHA256", "SHA512\n", "\tsha256 ",
    ])
    def test_unsupported_algorithm_rejected(self, name):
        with pytest.raises(UnsupportedHashAlgorithmError) as exc_info:
            CryptoHashProvider(name)

        assert exc_info.value.algorithm == name
        assert name in str(exc_info.value)

    def test_unsupported_algorithm_is_value_error(self):
        with pytest.raises(ValueError):
            CryptoHashProvider("MD5")

    def test_matches_hashlib(self, provider):
        assert provider.calculate_hash(b"hello") == hashlib.sha512(b"hello").digest()
        assert CryptoHashProvider("SHA256").calculate_hash(b"hello") == hashlib.sha256(b"hello").digest()

    def test_calculate_hash_deterministic(self, provider):
        assert provider.calculate_hash(b"package bytes") == provider.calculate_hash(b"package bytes")

    @pytest.mark.parametrize("data", [b"", b"a", b"x" * 20000, bytes(range(256))])
    def test_verify_round_trip(self, provider, data):
        assert provider.verify_hash(data, provider.calculate_hash(data)) is True

    @pytest.mark.parametrize("bit", [0, 7, 100, 8191])
    def test_verify_detects_single_bit_flip(self, provider, bit):
        data = bytes(range(256)) * 4
        digest = provider.calculate_hash(data)

        tampered = bytearray(data)
        tampered[bit // 8] ^= 1 << (bit % 8)

        assert provider.verify_hash(bytes(tampered), digest) is False

    def test_verify_rejects_other_algorithm_digest(self, provider):
        digest = CryptoHashProvider("SHA256").calculate_hash(b"data")
        assert provider.verify_hash(b"data", digest) is False

    def test_stream_matches_bytes(self, provider):
        data = b"0123456789" * 3000
        assert provider.calculate_stream_hash(io.BytesIO(data)) == provider.calculate_hash(data)

    def test_stream_hashes_from_current_position(self, provider):
        stream = io.BytesIO(b"headerbody")
        stream.seek(6)

        assert provider.calculate_stream_hash(stream) == provider.calculate_hash(b"body")
        # Stream is consumed, not rewound
        assert stream.read() == b""

    def test_consumed_stream_hashes_as_empty(self, provider):
        stream = io.BytesIO(b"content")
        stream.read()

        assert provider.calculate_stream_hash(stream) == provider.calculate_hash(b"")

    def test_encode_and_decode_hash(self, provider):
        digest = provider.calculate_hash(b"content")
        encoded = provider.encode_hash(digest)

        assert encoded == base64.b64encode(digest).decode("ascii")
        assert provider.decode_hash(encoded + "\n") == digest

    def test_decode_rejects_invalid_base64(self, provider):
        with pytest.raises(ValueError):
            provider.decode_hash("not base64!")
