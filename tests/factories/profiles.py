"""Factory for Profile models."""

import factory
from src.database.models import Profile
from src.utils.dates import utc_now
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class ProfileFactory(AsyncSQLAlchemyModelFactory[Profile]):
    class Meta:
        model = Profile

    id = UUIDFactory()
    email = factory.Sequence(lambda n: f"user{n}@example.org")
    full_name = factory.Faker("name")
    organization_id = None
    created_at = factory.LazyFunction(utc_now)
    updated_at = factory.LazyFunction(utc_now)
