"""Factory for Organization models."""

import factory
from src.database.models import Organization
from src.utils.dates import utc_now
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class OrganizationFactory(AsyncSQLAlchemyModelFactory[Organization]):
    """Factory for creating Organization instances."""

    class Meta:
        model = Organization

    id = UUIDFactory()
    name = factory.Faker("company")
    created_by = None
    created_at = factory.LazyFunction(utc_now)
    updated_at = factory.LazyFunction(utc_now)
