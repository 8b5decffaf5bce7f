# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Nonce generation for identity-token providers.

The raw nonce stays with the login attempt; only its SHA-256 digest is
sent to the provider. The provider echoes the nonce inside its signed
identity token, which binds that token to one attempt.
"""

import hashlib
import logging
import os
import string
from typing import Callable

from .errors import EntropyUnavailableError

logger = logging.getLogger(__name__)

# RFC 3986 unreserved characters
NONCE_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase + "-._~"

DEFAULT_NONCE_LENGTH = 32

# Largest multiple of the alphabet size that fits in a byte; bytes at or
# above it are discarded so every character is equally likely.
_ACCEPT_LIMIT = 256 - (256 % len(NONCE_ALPHABET))

_BATCH_SIZE = 16


class NonceGenerator:
    """Cryptographically secure nonce generator."""

    def __init__(self, random_bytes: Callable[[int], bytes] = os.urandom):
        self._random_bytes = random_bytes

    def generate(self, length: int = DEFAULT_NONCE_LENGTH) -> str:
        """
        Generate a nonce of exactly ``length`` characters.

        Raises:
            ValueError: If length is not positive
            EntropyUnavailableError: If the secure random source fails
        """
        if length <= 0:
            raise ValueError("Nonce length must be positive")

        chars = []
        while len(chars) < length:
            for value in self._read_batch():
                if value >= _ACCEPT_LIMIT:
                    continue
                chars.append(NONCE_ALPHABET[value % len(NONCE_ALPHABET)])
                if len(chars) == length:
                    break

        return ''.join(chars)

    def hash(self, value: str) -> str:
        """SHA-256 digest of ``value`` as lowercase hex."""
        return sha256_hex(value)

    def _read_batch(self) -> bytes:
        try:
            batch = self._random_bytes(_BATCH_SIZE)
        except (NotImplementedError, OSError) as e:
            logger.critical(f"Secure random source unavailable: {e}")
            raise EntropyUnavailableError(cause=e) from e

        if len(batch) != _BATCH_SIZE:
            logger.critical("Secure random source returned a short read")
            raise EntropyUnavailableError()
        return batch


def sha256_hex(value: str) -> str:
    """Deterministic one-way digest of a string."""
    return hashlib.sha256(value.encode('utf-8')).hexdigest()


_default_generator = NonceGenerator()


def random_nonce_string(length: int = DEFAULT_NONCE_LENGTH) -> str:
    """Convenience function to generate a nonce with the OS random source."""
    return _default_generator.generate(length)
