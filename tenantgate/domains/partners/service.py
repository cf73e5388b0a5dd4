# tenantgate/domains/partners/service.py
import logging
from typing import List

import httpx
from postgrest.exceptions import APIError

from tenantgate.core.query import (
    DataGateway,
    Embed,
    Filter,
    OrderBy,
    OrganizationScope,
    ScopedQuerySpec,
)
from tenantgate.domains.partners.models import PartnerInvite, PartnerResponse
from tenantgate.shared.exceptions import DuplicateRecordError, InvalidDataError

logger = logging.getLogger(__name__)

TABLE = "cross_organization_access"
HOST_COLUMN = "host_organization_id"
UNIQUE_VIOLATION = "23505"


def host_scope(host_organization_id: str) -> OrganizationScope:
    return OrganizationScope(organization_id=host_organization_id, column=HOST_COLUMN)


class PartnerService:
    """Cross-organization access granted by a host organization."""

    def __init__(self, db: DataGateway):
        self.db = db

    async def is_partner_of(
        self, host_organization_id: str, candidate_organization_id: str
    ) -> bool:
        """
        Check whether the candidate is an active partner of the host.

        Returns:
            True if an active row of relationship type "partner" links them
        """
        if not host_organization_id or not candidate_organization_id:
            return False

        spec = ScopedQuerySpec(
            table=TABLE,
            scope=host_scope(host_organization_id),
            filters=(
                Filter.eq("partner_organization_id", candidate_organization_id),
                Filter.eq("relationship_type", "partner"),
                Filter.eq("status", "active"),
            ),
        )
        try:
            return await self.db.count(spec) > 0
        except (APIError, httpx.HTTPError) as e:
            logger.error(
                f"Partner check {host_organization_id} -> "
                f"{candidate_organization_id} failed: {e}"
            )
            return False

    async def count_active_partners(self, scope: OrganizationScope) -> int:
        """Number of active "partner" relationships the scoped host has granted."""
        spec = ScopedQuerySpec(
            table=TABLE,
            scope=host_scope(scope.organization_id),
            filters=(
                Filter.eq("relationship_type", "partner"),
                Filter.eq("status", "active"),
            ),
        )
        try:
            return await self.db.count(spec)
        except (APIError, httpx.HTTPError) as e:
            logger.error(
                f"Failed to count partners of {scope.organization_id}: {e}"
            )
            return 0

    async def list_partners(self, scope: OrganizationScope) -> List[PartnerResponse]:
        """Partners of the scoped host that have not been revoked, newest first."""
        spec = ScopedQuerySpec(
            table=TABLE,
            scope=host_scope(scope.organization_id),
            columns=(
                "id",
                "partner_organization_id",
                "relationship_type",
                "status",
                "created_at",
            ),
            embeds=(
                Embed(
                    table="organizations",
                    alias="partner",
                    foreign_key="partner_organization_id",
                    columns=("id", "name", "slug"),
                ),
                Embed(
                    table="roles",
                    alias="permission_group",
                    foreign_key="permission_group_id",
                    columns=("id", "name"),
                ),
            ),
            filters=(Filter.neq("status", "revoked"),),
            order=OrderBy(column="created_at", descending=True),
        )
        rows = await self.db.fetch(spec)

        partners = []
        for row in rows:
            partner = row.get("partner") or {}
            group = row.get("permission_group") or {}
            partners.append(
                PartnerResponse(
                    id=row["id"],
                    partner_organization_id=row["partner_organization_id"],
                    partner_name=partner.get("name"),
                    partner_slug=partner.get("slug"),
                    relationship_type=row.get("relationship_type") or "partner",
                    status=row.get("status") or "pending",
                    permission_group_name=group.get("name"),
                    created_at=row.get("created_at"),
                )
            )
        return partners

    async def invite_partner(
        self, scope: OrganizationScope, invite: PartnerInvite
    ) -> dict:
        """
        Grant another organization pending access to the scoped host.

        Raises:
            InvalidDataError: If the host invites itself
            DuplicateRecordError: If the organization is already a partner
        """
        if invite.partner_organization_id == scope.organization_id:
            raise InvalidDataError("An organization cannot partner with itself")

        try:
            row = await self.db.insert(
                TABLE,
                {
                    "partner_organization_id": invite.partner_organization_id,
                    "relationship_type": invite.relationship_type,
                    "permission_group_id": invite.permission_group_id,
                    "status": "pending",
                },
                scope=host_scope(scope.organization_id),
            )
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateRecordError("Organization is already a partner")
            raise

        logger.info(
            f"Organization {scope.organization_id} invited partner "
            f"{invite.partner_organization_id}"
        )
        return row
