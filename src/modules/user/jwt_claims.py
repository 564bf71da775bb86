from uuid import UUID

from src.core.context import AuthIdentity


def extract_identity_from_jwt(payload: dict) -> AuthIdentity:
    """Build the caller identity from Supabase access-token claims.

    Raises:
        ValueError: when the subject is missing or not a UUID
    """
    user_id = UUID(str(payload.get("sub", "")))

    user_metadata = payload.get("user_metadata") or {}
    full_name = user_metadata.get("full_name") or user_metadata.get("name") or None

    return AuthIdentity(
        user_id=user_id,
        email=payload.get("email") or "",
        full_name=full_name,
    )
