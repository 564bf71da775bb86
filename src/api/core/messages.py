"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"

    # Authentication & Authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    AUTH_INSUFFICIENT_ROLE_PERMISSIONS = "AUTH_INSUFFICIENT_ROLE_PERMISSIONS"
    AUTH_MISSING_CONTEXT = "AUTH_MISSING_CONTEXT"

    # Application sessions
    SESSION_CREATED = "SESSION_CREATED"
    SESSION_REVOKED_OK = "SESSION_REVOKED_OK"
    SESSION_VALID = "SESSION_VALID"
    SESSION_MISSING = "SESSION_MISSING"
    SESSION_INVALID = "SESSION_INVALID"
    SESSION_REVOKED = "SESSION_REVOKED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    SESSION_USER_REQUIRED = "SESSION_USER_REQUIRED"
    SESSION_USER_MISMATCH = "SESSION_USER_MISMATCH"

    # User management
    USER_ONBOARDED = "USER_ONBOARDED"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Roles
    ROLES_RESOLVED = "ROLES_RESOLVED"
    ROLES_UPDATED = "ROLES_UPDATED"

    # Organization management
    ORGANIZATION_ASSIGNED = "ORGANIZATION_ASSIGNED"
    ORGANIZATION_NOT_FOUND = "ORGANIZATION_NOT_FOUND"
    ORGANIZATION_REQUIRED = "ORGANIZATION_REQUIRED"

    # Grants
    GRANT_CREATED = "GRANT_CREATED"
    GRANT_UPDATED = "GRANT_UPDATED"
    GRANT_DELETED = "GRANT_DELETED"
    GRANT_RESTORED = "GRANT_RESTORED"
    GRANT_NOT_FOUND = "GRANT_NOT_FOUND"
    GRANT_ORGANIZATION_IMMUTABLE = "GRANT_ORGANIZATION_IMMUTABLE"

    # Donor workflow
    DONOR_REQUEST_CREATED = "DONOR_REQUEST_CREATED"
    DONOR_ALREADY = "DONOR_ALREADY"
    DONOR_REQUEST_PENDING = "DONOR_REQUEST_PENDING"

    # Rate limiting
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    # Permission errors
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Service Errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"


# Default messages for each message code
DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    MessageCode.CREATED: "Resource created successfully",
    MessageCode.UPDATED: "Resource updated successfully",
    MessageCode.DELETED: "Resource deleted successfully",
    # Authentication & Authorization
    MessageCode.AUTH_REQUIRED: "Authentication required",
    MessageCode.UNAUTHORIZED: "Authentication required",
    MessageCode.FORBIDDEN: "Access denied",
    MessageCode.INVALID_TOKEN: "Invalid authentication token",
    MessageCode.AUTH_INSUFFICIENT_ROLE_PERMISSIONS: "Insufficient role permissions",
    MessageCode.AUTH_MISSING_CONTEXT: "Authentication context required",
    # Application sessions
    MessageCode.SESSION_CREATED: "Session created",
    MessageCode.SESSION_REVOKED_OK: "Session revoked",
    MessageCode.SESSION_VALID: "Session is valid",
    MessageCode.SESSION_MISSING: "No session token",
    MessageCode.SESSION_INVALID: "Invalid session",
    MessageCode.SESSION_REVOKED: "Session revoked",
    MessageCode.SESSION_EXPIRED: "Session expired",
    MessageCode.SESSION_USER_REQUIRED: "user_id is required",
    MessageCode.SESSION_USER_MISMATCH: "Cannot create a session for another user",
    # User management
    MessageCode.USER_ONBOARDED: "User onboarded successfully",
    MessageCode.USER_NOT_FOUND: "User not found",
    # Roles
    MessageCode.ROLES_RESOLVED: "Roles resolved",
    MessageCode.ROLES_UPDATED: "Roles updated successfully",
    # Organization management
    MessageCode.ORGANIZATION_ASSIGNED: "Organization assigned",
    MessageCode.ORGANIZATION_NOT_FOUND: "Organization not found",
    MessageCode.ORGANIZATION_REQUIRED: "No organization is assigned to this user",
    # Grants
    MessageCode.GRANT_CREATED: "Grant created successfully",
    MessageCode.GRANT_UPDATED: "Grant updated successfully",
    MessageCode.GRANT_DELETED: "Grant deleted successfully",
    MessageCode.GRANT_RESTORED: "Grant restored successfully",
    MessageCode.GRANT_NOT_FOUND: "Grant not found",
    MessageCode.GRANT_ORGANIZATION_IMMUTABLE: "A grant cannot be moved to another organization",
    # Donor workflow
    MessageCode.DONOR_REQUEST_CREATED: "Donor request submitted",
    MessageCode.DONOR_ALREADY: "You are already a donor",
    MessageCode.DONOR_REQUEST_PENDING: "Request already pending",
    # Rate limiting
    MessageCode.RATE_LIMIT_EXCEEDED: "Rate limit exceeded",
    # Validation errors
    MessageCode.VALIDATION_ERROR: "Validation failed",
    MessageCode.INVALID_INPUT: "Invalid input provided",
    # Permission errors
    MessageCode.INSUFFICIENT_PERMISSIONS: "Insufficient permissions",
    # Service Errors
    MessageCode.EXTERNAL_SERVICE_ERROR: "External service error",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.INTERNAL_SERVER_ERROR: "Internal server error",
    MessageCode.RESOURCE_NOT_FOUND: "Resource not found",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.CONFLICT: "Data integrity constraint violated",
    MessageCode.NOT_FOUND: "Resource not found",
}

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Base API response model with consistent structure and proper typing."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
