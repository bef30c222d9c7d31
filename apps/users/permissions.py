"""
Role-based permission utilities for the Orchid Portal.
Roles come from the remote account (roleId) and are cached in the session at login.
"""

from dataclasses import dataclass
from enum import IntEnum

from django.http import HttpRequest


class UserRole(IntEnum):
    SUPERADMIN = 1
    ADMIN = 2
    CUSTOMER = 3


ROLE_NAMES = {
    UserRole.SUPERADMIN: 'Super Admin',
    UserRole.ADMIN: 'Admin',
    UserRole.CUSTOMER: 'Customer',
}


@dataclass(frozen=True)
class UserPermissions:
    can_edit_roles: bool = False
    can_manage_accounts: bool = False
    can_manage_orchids: bool = False
    can_manage_orders: bool = False
    can_delete_accounts: bool = False


def _coerce_role(role_id: int | str | None) -> UserRole | None:
    try:
        return UserRole(int(role_id))
    except (TypeError, ValueError):
        return None


def get_role_id(request: HttpRequest) -> UserRole | None:
    return _coerce_role(getattr(request, 'role_id', None) or request.session.get('role_id'))


def is_super_admin(role_id: int | str | None) -> bool:
    return _coerce_role(role_id) is UserRole.SUPERADMIN


def is_admin_or_higher(role_id: int | str | None) -> bool:
    return _coerce_role(role_id) in (UserRole.SUPERADMIN, UserRole.ADMIN)


def get_user_permissions(role_id: int | str | None) -> UserPermissions:
    role = _coerce_role(role_id)
    if role is UserRole.SUPERADMIN:
        return UserPermissions(
            can_edit_roles=True,
            can_manage_accounts=True,
            can_manage_orchids=True,
            can_manage_orders=True,
            can_delete_accounts=True,
        )
    if role is UserRole.ADMIN:
        # Admins manage everything except roles and account deletion
        return UserPermissions(
            can_manage_accounts=True,
            can_manage_orchids=True,
            can_manage_orders=True,
        )
    return UserPermissions()


def can_edit_user_role(role_id: int | str | None) -> bool:
    return is_super_admin(role_id)


def can_delete_user(role_id: int | str | None, target_role_id: int | str | None) -> bool:
    """Superadmins delete any account except other superadmins"""
    if not is_super_admin(role_id):
        return False
    return _coerce_role(target_role_id) is not UserRole.SUPERADMIN


def can_edit_user(role_id: int | str | None, target_role_id: int | str | None) -> bool:
    role = _coerce_role(role_id)
    target = _coerce_role(target_role_id)
    if role is UserRole.SUPERADMIN:
        return True
    if role is UserRole.ADMIN:
        return target in (UserRole.ADMIN, UserRole.CUSTOMER)
    return False


def get_role_name(role_id: int | str | None) -> str:
    role = _coerce_role(role_id)
    return ROLE_NAMES.get(role, 'Unknown') if role else 'Unknown'


def get_available_roles(role_id: int | str | None) -> list[dict[str, int | str]]:
    """Roles the current user may assign (only superadmins assign roles)"""
    if not is_super_admin(role_id):
        return []
    return [{'id': int(role), 'name': ROLE_NAMES[role]} for role in UserRole]
