"""
Shared helpers for fedlogin tests.
"""

import jwt

from fedlogin.auth.nonce import NonceGenerator

TEST_SIGNING_KEY = "fedlogin-test-signing-key-0123456789abcdef"


class FixedNonceGenerator(NonceGenerator):
    """Nonce generator returning predetermined values."""

    def __init__(self, *nonces):
        super().__init__()
        self._nonces = list(nonces)
        self.generated = []

    def generate(self, length=32):
        nonce = self._nonces.pop(0)
        self.generated.append(nonce)
        return nonce


def make_identity_token(nonce=None, subject="apple-user-001"):
    """Signed identity token as an identity-token provider would return it."""
    claims = {"iss": "https://appleid.apple.com", "sub": subject, "aud": "com.example.app"}
    if nonce is not None:
        claims["nonce"] = nonce
    return jwt.encode(claims, TEST_SIGNING_KEY, algorithm="HS256")
