# tenantgate/domains/partners/models.py
from typing import Literal, Optional

from pydantic import BaseModel

RelationshipType = Literal["partner", "affiliate"]


class PartnerInvite(BaseModel):
    partner_organization_id: str
    relationship_type: RelationshipType = "partner"
    permission_group_id: Optional[str] = None


class PartnerResponse(BaseModel):
    id: str
    partner_organization_id: str
    partner_name: Optional[str]
    partner_slug: Optional[str]
    relationship_type: str
    status: str
    permission_group_name: Optional[str]
    created_at: Optional[str]


class PartnerStats(BaseModel):
    active_partners: int
