import hashlib
import secrets

SESSION_TOKEN_BYTES: int = 32


class HashingService:
    """Opaque token generation and hashing for application sessions."""

    @staticmethod
    def generate_session_token() -> str:
        """Generate a URL-safe random session token."""
        return secrets.token_urlsafe(SESSION_TOKEN_BYTES)

    @staticmethod
    def hash_session_token(plain_token: str) -> str:
        """
        Hash a session token with SHA-256.

        Tokens carry 256 bits of randomness, so an unsalted digest is enough
        to look them up without storing the plain value.
        """
        return hashlib.sha256(plain_token.encode("utf-8")).hexdigest()
