"""
Tests for nonce generation and hashing.
"""

import pytest

from fedlogin.auth import (
    NonceGenerator,
    NONCE_ALPHABET,
    EntropyUnavailableError,
    random_nonce_string,
    sha256_hex,
)


class TestNonceGeneration:
    """Test nonce generation."""

    def test_alphabet(self):
        """The alphabet has 66 distinct printable characters."""
        assert len(NONCE_ALPHABET) == 66
        assert len(set(NONCE_ALPHABET)) == 66
        assert all(ch.isprintable() and not ch.isspace() for ch in NONCE_ALPHABET)

    @pytest.mark.parametrize("length", [1, 7, 16, 32, 64, 257])
    def test_exact_length_and_alphabet(self, length):
        """Generated nonces have the requested length and only use the alphabet."""
        nonce = NonceGenerator().generate(length)
        assert len(nonce) == length
        assert set(nonce) <= set(NONCE_ALPHABET)

    def test_default_length(self):
        """The default nonce is 32 characters."""
        assert len(random_nonce_string()) == 32

    def test_calls_are_independent(self):
        """Repeated calls do not repeat values."""
        generator = NonceGenerator()
        nonces = {generator.generate(32) for _ in range(200)}
        assert len(nonces) == 200

    @pytest.mark.parametrize("length", [0, -1])
    def test_non_positive_length(self, length):
        """Non-positive lengths are rejected."""
        with pytest.raises(ValueError):
            NonceGenerator().generate(length)

    def test_rejection_sampling(self):
        """Bytes at or above the acceptance limit are discarded."""
        generator = NonceGenerator(random_bytes=lambda n: bytes([197, 198, 255, 0] * (n // 4)))
        assert generator.generate(2) == "~0"
        assert generator.generate(4) == "~0~0"


class TestEntropyFailure:
    """Test behaviour when the secure random source fails."""

    def test_unavailable_source_is_fatal(self):
        """An unavailable random source raises EntropyUnavailableError."""
        def broken(n):
            raise NotImplementedError("no randomness source")

        with pytest.raises(EntropyUnavailableError) as exc_info:
            NonceGenerator(random_bytes=broken).generate(8)
        assert isinstance(exc_info.value.cause, NotImplementedError)

    def test_os_error_is_fatal(self):
        """OS level read errors are fatal too."""
        def broken(n):
            raise OSError("read failed")

        with pytest.raises(EntropyUnavailableError):
            NonceGenerator(random_bytes=broken).generate(8)

    def test_short_read_is_fatal(self):
        """A short read from the random source is fatal."""
        with pytest.raises(EntropyUnavailableError):
            NonceGenerator(random_bytes=lambda n: b"\x00").generate(8)

    def test_not_an_ordinary_exception(self):
        """The fatal error escapes ``except Exception`` handlers."""
        assert not issubclass(EntropyUnavailableError, Exception)
        assert issubclass(EntropyUnavailableError, BaseException)


class TestNonceHash:
    """Test nonce hashing."""

    def test_known_digest(self):
        """SHA-256 of a known input."""
        assert sha256_hex("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_deterministic(self):
        """Hashing is deterministic and fixed size."""
        generator = NonceGenerator()
        digest = generator.hash("N1")
        assert digest == generator.hash("N1")
        assert len(digest) == 64
        assert all(ch in "0123456789abcdef" for ch in digest)

    def test_distinct_inputs(self):
        """Different inputs give different digests."""
        assert sha256_hex("N1") != sha256_hex("N2")
        assert sha256_hex("N1") != "N1"
