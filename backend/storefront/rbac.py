"""
Roles and the permissions each route requires.

Routes name a single Permission; whether a role may use the route is decided
only by ROLE_PERMISSIONS. There is no role hierarchy: a role holds exactly the
permissions listed for it.
"""
from enum import Enum
from typing import FrozenSet


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Permission(str, Enum):
    PRODUCTS_WRITE = "products:write"
    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    # access limited to the caller's own user record
    USERS_READ_SELF = "users:read:self"
    USERS_WRITE_SELF = "users:write:self"


ROLE_PERMISSIONS = {
    Role.USER: frozenset({Permission.USERS_READ_SELF, Permission.USERS_WRITE_SELF}),
    Role.ADMIN: frozenset(
        {
            Permission.PRODUCTS_WRITE,
            Permission.USERS_READ,
            Permission.USERS_WRITE,
            Permission.USERS_READ_SELF,
            Permission.USERS_WRITE_SELF,
        }
    ),
}


def permissions_for(role: Role) -> FrozenSet[Permission]:
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in permissions_for(role)
