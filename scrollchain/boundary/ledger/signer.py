"""
Local signer.

HMAC-SHA256 signer holding a secret in process memory. Development and test
stand-in for a wallet; key custody is out of scope.

Dependencies: hashlib, hmac, secrets (stdlib)
System role: Signer implementation for local runs
"""

import hashlib
import hmac
import secrets


class LocalSigner:
    """Signer identified by a public identity string."""

    def __init__(self, public_identity: str, secret: bytes | None = None) -> None:
        self._public_identity = public_identity
        self._secret = secret or secrets.token_bytes(32)

    @property
    def public_identity(self) -> str:
        return self._public_identity

    def sign(self, payload: bytes) -> bytes:
        return hmac.new(self._secret, payload, hashlib.sha256).digest()

    def __repr__(self) -> str:
        return f"LocalSigner(public_identity={self._public_identity!r})"
