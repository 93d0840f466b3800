"""Role capabilities and view policy.

Every mutating or scoped portal operation checks a Permission at entry, and
view selection is a pure function of role rather than a branch in rendering.
"""

import logging
from enum import Enum

from services.invoices.errors import Forbidden
from services.invoices.models import UserRole, View

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    # Invoice actions
    VIEW_ALL_INVOICES = "VIEW_ALL_INVOICES"
    VIEW_OWN_INVOICES = "VIEW_OWN_INVOICES"
    UPLOAD_INVOICE = "UPLOAD_INVOICE"
    APPROVE_INVOICE = "APPROVE_INVOICE"
    SETTLE_INVOICE = "SETTLE_INVOICE"

    # Treasury
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    VIEW_SUPPLIERS = "VIEW_SUPPLIERS"


# Role -> Permissions mapping
ROLE_PERMISSIONS: dict[UserRole, frozenset[Permission]] = {
    UserRole.ADMIN: frozenset(
        {
            Permission.VIEW_ALL_INVOICES,
            Permission.APPROVE_INVOICE,
            Permission.SETTLE_INVOICE,
            Permission.VIEW_DASHBOARD,
            Permission.VIEW_SUPPLIERS,
        }
    ),
    UserRole.SUPPLIER: frozenset(
        {
            Permission.VIEW_OWN_INVOICES,
            Permission.UPLOAD_INVOICE,
        }
    ),
}

ROLE_VIEWS: dict[UserRole, frozenset[View]] = {
    UserRole.ADMIN: frozenset({View.ADMIN_DASHBOARD, View.SUPPLIER_LIST}),
    UserRole.SUPPLIER: frozenset({View.SUPPLIER_DASHBOARD, View.INVOICE_UPLOAD}),
}

HOME_VIEWS: dict[UserRole, View] = {
    UserRole.ADMIN: View.ADMIN_DASHBOARD,
    UserRole.SUPPLIER: View.SUPPLIER_DASHBOARD,
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    """Basic role-based check."""
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def require_permission(role: UserRole, permission: Permission) -> None:
    """Raise Forbidden unless ``role`` grants ``permission``.

    Args:
        role: Acting role
        permission: Capability the operation needs

    Raises:
        Forbidden: If the role lacks the capability
    """
    if not has_permission(role, permission):
        logger.warning(f"Role {role.value} denied permission {permission.value}")
        raise Forbidden(f"{role.value} may not {permission.value}")


def allowed_views(role: UserRole | None) -> frozenset[View]:
    """Views reachable for a role; anonymous visitors only see LOGIN."""
    if role is None:
        return frozenset({View.LOGIN})
    return ROLE_VIEWS[role]


def home_view(role: UserRole | None) -> View:
    """Landing view after login."""
    if role is None:
        return View.LOGIN
    return HOME_VIEWS[role]
