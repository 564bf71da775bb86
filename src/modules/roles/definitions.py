"""Role set helpers: normalization, inheritance and permission checks.

Roles travel through the application as ``frozenset[Role]``. The boolean
columns of ``user_roles_denorm`` and the loose string lists coming from
clients are converted at the boundary with :func:`roles_from_record`,
:func:`apply_roles_to_record` and :func:`normalize_roles`.
"""

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from src.database.models.roles import (
    Permission,
    Role,
    UserRolesRecord,
    get_permissions_for_role,
)

T = TypeVar("T")

ROLE_ORDER: tuple[Role, ...] = tuple(Role)

# Order used when a single "most privileged" role has to be picked
HIGHEST_ROLE_ORDER: tuple[Role, ...] = (
    Role.ADMIN,
    Role.DONOR,
    Role.MEMBER,
    Role.CLERK,
    Role.VIEWER,
)

ROLE_INHERITANCE: dict[Role, frozenset[Role]] = {
    Role.ADMIN: frozenset({Role.ADMIN, Role.VIEWER, Role.DONOR, Role.MEMBER}),
    Role.DONOR: frozenset({Role.DONOR, Role.MEMBER}),
    Role.CLERK: frozenset({Role.CLERK}),
    Role.MEMBER: frozenset({Role.MEMBER}),
    Role.VIEWER: frozenset({Role.VIEWER}),
}

ELEVATED_ROLES: frozenset[Role] = frozenset({Role.ADMIN})
DEFAULT_ROLES: frozenset[Role] = frozenset({Role.VIEWER})

_RECORD_FLAGS: dict[Role, str] = {role: f"is_{role.value}" for role in Role}


def normalize_roles(values: Iterable[Any] | None) -> frozenset[Role]:
    """Convert loose role values into a role set, dropping unknown entries."""
    roles: set[Role] = set()
    for value in values or ():
        if isinstance(value, Role):
            roles.add(value)
            continue
        if not isinstance(value, str):
            continue
        try:
            roles.add(Role(value.strip().lower()))
        except ValueError:
            continue
    return frozenset(roles)


def ensure_roles(roles: Iterable[Role] | None) -> frozenset[Role]:
    """Return the role set, or ``{viewer}`` when it is empty."""
    normalized = normalize_roles(roles)
    return normalized or DEFAULT_ROLES


def roles_from_record(record: UserRolesRecord | None) -> frozenset[Role]:
    if record is None:
        return DEFAULT_ROLES
    roles = frozenset(
        role for role, flag in _RECORD_FLAGS.items() if getattr(record, flag, False)
    )
    return roles or DEFAULT_ROLES


def record_flags(roles: Iterable[Role]) -> dict[str, bool]:
    """Column values for a role set; an empty set is stored as viewer-only."""
    effective = ensure_roles(roles)
    return {flag: role in effective for role, flag in _RECORD_FLAGS.items()}


def apply_roles_to_record(
    record: UserRolesRecord, roles: Iterable[Role]
) -> UserRolesRecord:
    for flag, value in record_flags(roles).items():
        setattr(record, flag, value)
    return record


def sort_roles(roles: Iterable[Role]) -> list[Role]:
    """Roles in canonical order."""
    held = set(roles)
    return [role for role in ROLE_ORDER if role in held]


def first_available_role(roles: Iterable[Role]) -> Role:
    ordered = sort_roles(roles)
    return ordered[0] if ordered else Role.VIEWER


def expand_roles(roles: Iterable[Role]) -> frozenset[Role]:
    """All roles satisfied by the given set, following inheritance."""
    expanded: set[Role] = set()
    for role in roles:
        expanded |= ROLE_INHERITANCE.get(role, frozenset({role}))
    return frozenset(expanded)


def has_role(roles: Iterable[Role], required: Role | Iterable[Role]) -> bool:
    """True when the role set satisfies any of the required roles."""
    required_set = {required} if isinstance(required, Role) else set(required)
    return bool(expand_roles(roles) & required_set)


def has_all_roles(roles: Iterable[Role], required: Iterable[Role]) -> bool:
    return set(required).issubset(expand_roles(roles))


def highest_role(roles: Iterable[Role]) -> Role:
    held = set(roles)
    for role in HIGHEST_ROLE_ORDER:
        if role in held:
            return role
    return Role.VIEWER


def has_permission(roles: Iterable[Role], permission: Permission) -> bool:
    """True when any held role grants the permission."""
    return any(permission in get_permissions_for_role(role) for role in roles)


def is_elevated(roles: Iterable[Role]) -> bool:
    return bool(ELEVATED_ROLES & set(roles))


def filter_by_role(
    items: Iterable[T], roles: Iterable[Role], key: str = "roles"
) -> list[T]:
    """Keep the items whose ``key`` entry (a role or list of roles) the user satisfies.

    Items without the key are visible to everyone.
    """
    held = frozenset(roles)
    visible = []
    for item in items:
        if isinstance(item, Mapping):
            required = item.get(key)
        else:
            required = getattr(item, key, None)

        if required is None:
            visible.append(item)
            continue

        if isinstance(required, (Role, str)):
            required_roles = normalize_roles([required])
        else:
            required_roles = normalize_roles(required)

        if has_role(held, required_roles):
            visible.append(item)
    return visible


def role_definitions() -> dict[str, list[str]]:
    """Role to permission table, in canonical order."""
    return {
        role.value: sorted(p.value for p in get_permissions_for_role(role))
        for role in ROLE_ORDER
    }
