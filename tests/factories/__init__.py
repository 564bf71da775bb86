"""Test factories for Grant Tracker models."""

from .base import AsyncSQLAlchemyModelFactory
from .donor_requests import DonorRequestFactory
from .grants import GrantFactory
from .organizations import OrganizationFactory
from .profiles import ProfileFactory
from .roles import UserRolesRecordFactory
from .sessions import AppSessionFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "AppSessionFactory",
    "DonorRequestFactory",
    "GrantFactory",
    "OrganizationFactory",
    "ProfileFactory",
    "UserRolesRecordFactory",
]
