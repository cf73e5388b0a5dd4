# tenantgate/domains/organizations/models.py
import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class Organization(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str
    status: Literal["active", "suspended"] = "active"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Organization":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            slug=row.get("slug") or "",
            status=row.get("status") or "active",
        )


class OrganizationCreate(BaseModel):
    name: str
    slug: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Organization name cannot be empty")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        v = v.strip().lower()
        if not SLUG_PATTERN.match(v):
            raise ValueError(
                "Slug may only contain lowercase letters, digits and hyphens"
            )
        return v


class OrganizationMemberResponse(BaseModel):
    id: str
    user_id: str
    email: Optional[str]
    name: Optional[str]
    is_organization_owner: bool
    position_name: Optional[str]
    status: str


class OrganizationOverview(BaseModel):
    organization: Organization
    effective_organization_id: str
    modules: list[str]
    active_partners: int
