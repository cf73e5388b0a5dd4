# tenantgate/domains/organizations/service.py
import logging
from typing import List, Optional

import httpx
from postgrest.exceptions import APIError

from tenantgate.core.query import (
    DataGateway,
    Embed,
    Filter,
    OrderBy,
    OrganizationScope,
    QuerySpec,
    ScopedQuerySpec,
)
from tenantgate.domains.organizations.models import (
    Organization,
    OrganizationCreate,
    OrganizationMemberResponse,
)
from tenantgate.shared.exceptions import DuplicateRecordError

logger = logging.getLogger(__name__)

ORGANIZATION_COLUMNS = ("id", "name", "slug", "status")

UNIQUE_VIOLATION = "23505"


class OrganizationService:
    def __init__(self, db: DataGateway):
        self.db = db

    async def _find_one(self, column: str, value: str) -> Optional[Organization]:
        spec = QuerySpec(
            table="organizations",
            columns=ORGANIZATION_COLUMNS,
            filters=(Filter.eq(column, value),),
            limit=1,
        )
        try:
            rows = await self.db.fetch(spec)
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Organization lookup by {column}={value} failed: {e}")
            return None

        return Organization.from_row(rows[0]) if rows else None

    async def get_by_id(self, organization_id: str) -> Optional[Organization]:
        """Organization with the given id, or None if there is none."""
        if not organization_id:
            return None
        return await self._find_one("id", organization_id)

    async def get_by_slug(self, slug: str) -> Optional[Organization]:
        """Organization with the given slug, or None if there is none."""
        if not slug:
            return None
        return await self._find_one("slug", slug)

    async def list_active(self) -> List[Organization]:
        """
        All active organizations ordered by name.

        This backs the platform admin organization picker.
        """
        spec = QuerySpec(
            table="organizations",
            columns=ORGANIZATION_COLUMNS,
            filters=(Filter.eq("status", "active"),),
            order=OrderBy(column="name"),
        )
        rows = await self.db.fetch(spec)
        return [Organization.from_row(row) for row in rows]

    async def list_all(self) -> List[Organization]:
        spec = QuerySpec(
            table="organizations",
            columns=ORGANIZATION_COLUMNS,
            order=OrderBy(column="name"),
        )
        rows = await self.db.fetch(spec)
        return [Organization.from_row(row) for row in rows]

    async def create_organization(self, data: OrganizationCreate) -> Organization:
        """
        Create a new active organization.

        Raises:
            DuplicateRecordError: If the slug is already taken
        """
        try:
            row = await self.db.insert(
                "organizations",
                {"name": data.name, "slug": data.slug, "status": "active"},
            )
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateRecordError(
                    f"Organization slug '{data.slug}' is already in use"
                )
            raise

        logger.info(f"Created organization {row.get('id')} ({data.slug})")
        return Organization.from_row(row)

    async def get_organization_members(
        self, scope: OrganizationScope
    ) -> List[OrganizationMemberResponse]:
        """
        Get all memberships of the scoped organization.

        Args:
            scope: The organization to list members of

        Returns:
            List of members with user and position details
        """
        spec = ScopedQuerySpec(
            table="organization_users",
            scope=scope,
            columns=("id", "user_id", "is_organization_owner", "status"),
            embeds=(
                Embed(
                    table="users",
                    alias="user",
                    foreign_key="user_id",
                    columns=("id", "name", "email"),
                ),
                Embed(
                    table="staff_positions",
                    alias="position",
                    foreign_key="primary_position_id",
                    columns=("id", "name"),
                ),
            ),
            order=OrderBy(column="created_at"),
        )
        rows = await self.db.fetch(spec)

        members = []
        for row in rows:
            user = row.get("user") or {}
            position = row.get("position") or {}
            members.append(
                OrganizationMemberResponse(
                    id=row["id"],
                    user_id=row["user_id"],
                    email=user.get("email"),
                    name=user.get("name"),
                    is_organization_owner=bool(row.get("is_organization_owner")),
                    position_name=position.get("name"),
                    status=row.get("status") or "active",
                )
            )
        return members
