"""Factory for application sessions."""

from datetime import timedelta

import factory
from src.database.models import AppSession
from src.utils.dates import utc_now
from src.utils.hashing import HashingService
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class AppSessionFactory(AsyncSQLAlchemyModelFactory[AppSession]):
    """Build with ``token_hash=HashingService.hash_session_token(token)`` to look it up."""

    class Meta:
        model = AppSession

    id = UUIDFactory()
    user_id = UUIDFactory()
    token_hash = factory.LazyFunction(
        lambda: HashingService.hash_session_token(HashingService.generate_session_token())
    )
    persistent = False
    revoked = False
    created_at = factory.LazyFunction(utc_now)
    expires_at = factory.LazyFunction(lambda: utc_now() + timedelta(hours=1))
