"""
Password hashing and signed access tokens.

Passwords are hashed with bcrypt. Tokens are JSON Web Tokens signed with
HMAC-SHA256: ``header.payload.signature``, each part base64url encoded
without padding, so any HS256-aware JWT library can verify them given the
secret.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time

import bcrypt
from pydantic import ValidationError

from ..config import Settings
from ..errors import InvalidTokenError, PasswordTooLongError
from .models import PublicUser, TokenClaims

_HEADER = {"alg": "HS256", "typ": "JWT"}

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _b64_url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64_url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _encode_json(obj: dict) -> str:
    return _b64_url_encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


class CredentialService:
    def __init__(self, settings: Settings) -> None:
        self._rounds = settings.bcrypt_rounds
        self._secret = settings.jwt_secret.encode("utf-8")
        self._ttl = settings.token_ttl_seconds

    # ── Passwords ────────────────────────────────────────────────────────

    def hash_password(self, plain: str) -> str:
        """Raises ``PasswordTooLongError`` past bcrypt's 72-byte input limit."""
        if len(plain.encode()) > MAX_PASSWORD_BYTES:
            raise PasswordTooLongError(MAX_PASSWORD_BYTES)
        return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify_password(self, plain: str, hashed: str) -> bool:
        if len(plain.encode()) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(plain.encode(), hashed.encode())
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    # ── Tokens ───────────────────────────────────────────────────────────

    def _sign(self, signing_input: bytes) -> bytes:
        return hmac.new(self._secret, signing_input, hashlib.sha256).digest()

    def issue_token(self, user: PublicUser, now: float | None = None) -> str:
        """Create a token for ``user`` that expires ``token_ttl_seconds`` after ``now``."""
        issued_at = int(now if now is not None else time.time())
        claims = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        signing_input = f"{_encode_json(_HEADER)}.{_encode_json(claims)}"
        signature = _b64_url_encode(self._sign(signing_input.encode("ascii")))
        return f"{signing_input}.{signature}"

    def verify_token(self, token: str, now: float | None = None) -> TokenClaims:
        """
        Check signature and expiry and return the embedded claims.

        Raises ``InvalidTokenError`` for malformed, tampered or expired tokens.
        """
        parts = token.split(".")
        if len(parts) != 3:
            raise InvalidTokenError("Token must have three segments")
        header_b64, payload_b64, signature_b64 = parts

        try:
            actual_sig = _b64_url_decode(signature_b64)
            header = json.loads(_b64_url_decode(header_b64))
        except ValueError as exc:
            raise InvalidTokenError("Token is not valid base64url JSON") from exc
        if not isinstance(header, dict) or header.get("alg") != _HEADER["alg"]:
            raise InvalidTokenError("Unsupported token algorithm")

        expected_sig = self._sign(f"{header_b64}.{payload_b64}".encode("utf-8"))
        if not hmac.compare_digest(expected_sig, actual_sig):
            raise InvalidTokenError("Signature mismatch")

        try:
            claims = TokenClaims.model_validate_json(_b64_url_decode(payload_b64))
        except (ValueError, ValidationError) as exc:
            raise InvalidTokenError("Malformed token payload") from exc

        current = now if now is not None else time.time()
        if claims.exp <= current:
            raise InvalidTokenError("Token has expired")
        return claims
