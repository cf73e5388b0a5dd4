# tenantgate/domains/auth/models.py
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from tenantgate.domains.organizations.models import Organization


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    is_active: bool = True
    is_platform_super_admin: bool = False
    is_platform_system_admin: bool = False

    @property
    def is_platform_admin(self) -> bool:
        return self.is_platform_super_admin or self.is_platform_system_admin

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "User":
        return cls(
            id=row["id"],
            email=row["email"],
            name=row.get("name") or row["email"],
            is_active=bool(row.get("is_active", True)),
            is_platform_super_admin=bool(row.get("is_platform_super_admin")),
            is_platform_system_admin=bool(row.get("is_platform_system_admin")),
        )


class StaffPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    default_role_id: Optional[str] = None
    color: Optional[str] = None


class Membership(BaseModel):
    """An active organization_users row with its organization and position."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    organization_id: str
    is_organization_owner: bool = False
    primary_position_id: Optional[str] = None
    organization: Optional[Organization] = None
    position: Optional[StaffPosition] = None

    @property
    def role_id(self) -> Optional[str]:
        return self.position.default_role_id if self.position else None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Membership":
        org_row = row.get("organizations")
        position_row = row.get("staff_positions")
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            organization_id=row["organization_id"],
            is_organization_owner=bool(row.get("is_organization_owner")),
            primary_position_id=row.get("primary_position_id"),
            organization=Organization.from_row(org_row) if org_row else None,
            position=StaffPosition(**position_row) if position_row else None,
        )


class MembershipResolution(BaseModel):
    """Outcome of looking up a user's active membership."""

    model_config = ConfigDict(frozen=True)

    membership: Optional[Membership] = None
    conflict: bool = False


class GrantResponse(BaseModel):
    module: str
    resource: str
    action: str


class SessionState(BaseModel):
    user_id: Optional[str]
    user_email: Optional[str]
    user_name: Optional[str]
    organization_id: Optional[str]
    organization_name: Optional[str]
    organization_slug: Optional[str]
    position_name: Optional[str]
    is_platform_admin: bool
    is_organization_admin: bool
    membership_conflict: bool
    modules: list[str]
    permissions: list[GrantResponse]
    admin_selected_organization: Optional[Organization]
    effective_organization_id: Optional[str]
