from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from tenantgate.domains.auth.models import Membership, User


class PermissionAction(str, Enum):
    """Actions a role permission row can grant on a resource."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class ModuleCode(str, Enum):
    """Feature areas an organization can subscribe to."""

    CRM = "crm"
    BOOKINGS = "bookings"
    TRANSPORTATION = "transportation"
    COMMUNICATIONS = "communications"
    VISIBILITY = "visibility"
    FINANCE = "finance"
    SETTINGS = "settings"


# role_permissions flag column -> action it grants
ACTION_COLUMNS: dict[str, PermissionAction] = {
    "can_create": PermissionAction.CREATE,
    "can_read": PermissionAction.READ,
    "can_update": PermissionAction.UPDATE,
    "can_delete": PermissionAction.DELETE,
}


def _code(value: "str | Enum") -> str:
    return value.value if isinstance(value, Enum) else str(value)


class PermissionGrant(BaseModel):
    """One capability: ``action`` on ``resource`` within ``module``."""

    model_config = ConfigDict(frozen=True)

    module: str
    resource: str
    action: PermissionAction

    @classmethod
    def of(
        cls,
        action: "PermissionAction | str",
        module: "ModuleCode | str",
        resource: str,
    ) -> "PermissionGrant":
        return cls(module=_code(module), resource=resource, action=action)


class PermissionCheck(BaseModel):
    """A requested (action, module, resource) check."""

    model_config = ConfigDict(frozen=True)

    action: PermissionAction
    module: str
    resource: str

    def as_grant(self) -> PermissionGrant:
        return PermissionGrant(
            module=self.module, resource=self.resource, action=self.action
        )


class PermissionSnapshot(BaseModel):
    """
    Everything known about what the signed-in user may see.

    Built once per identity by the session resolver and never mutated;
    a changed identity or subscription means a new snapshot.
    """

    model_config = ConfigDict(frozen=True)

    user: Optional[User] = None
    membership: Optional[Membership] = None
    membership_conflict: bool = False
    modules: frozenset[str] = frozenset()
    grants: frozenset[PermissionGrant] = frozenset()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_platform_admin(self) -> bool:
        return self.user.is_platform_admin if self.user else False

    @property
    def is_organization_admin(self) -> bool:
        return self.membership.is_organization_owner if self.membership else False

    @property
    def organization_id(self) -> Optional[str]:
        return self.membership.organization_id if self.membership else None


ANONYMOUS = PermissionSnapshot()
