import asyncio
import logging
from typing import Optional

import httpx
from postgrest.exceptions import APIError

from tenantgate.core.query import DataGateway, Embed, Filter, QuerySpec
from tenantgate.domains.auth.models import Membership, MembershipResolution, User
from tenantgate.domains.modules.service import ModuleSubscriptionService
from tenantgate.domains.roles.service import RolePermissionService
from tenantgate.shared.permissions.models import ANONYMOUS, PermissionSnapshot

logger = logging.getLogger(__name__)

MEMBERSHIP_EMBEDS = (
    Embed(
        table="organizations",
        foreign_key="organization_id",
        columns=("id", "name", "slug", "status"),
    ),
    Embed(
        table="staff_positions",
        foreign_key="primary_position_id",
        columns=("id", "name", "default_role_id", "color"),
    ),
)


class SessionResolver:
    """
    Turns an authenticated email into a permission snapshot.

    Lookups never raise: a missing row or a failed request resolves to
    "no access" and is logged.
    """

    def __init__(self, db: DataGateway):
        self.db = db
        self.modules = ModuleSubscriptionService(db)
        self.roles = RolePermissionService(db)

    async def resolve_user(self, email: Optional[str]) -> Optional[User]:
        """
        Find the active user with the given email.

        Args:
            email: Email from the identity provider

        Returns:
            User if an active one matches, None otherwise
        """
        if not email or not email.strip():
            return None

        spec = QuerySpec(
            table="users",
            filters=(
                Filter.eq("email", email.strip()),
                Filter.eq("is_active", True),
            ),
            limit=1,
        )
        try:
            rows = await self.db.fetch(spec)
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"User lookup failed for {email}: {e}")
            return None

        return User.from_row(rows[0]) if rows else None

    async def resolve_membership(self, user_id: Optional[str]) -> MembershipResolution:
        """
        Find the user's single active organization membership.

        More than one active membership is not resolved by picking one; it
        is reported as a conflict and the user is treated as unaffiliated.

        Args:
            user_id: Resolved user id

        Returns:
            MembershipResolution with the membership, or none, or a conflict
        """
        if not user_id:
            return MembershipResolution()

        spec = QuerySpec(
            table="organization_users",
            columns=(
                "id",
                "user_id",
                "organization_id",
                "is_organization_owner",
                "primary_position_id",
            ),
            embeds=MEMBERSHIP_EMBEDS,
            filters=(Filter.eq("user_id", user_id), Filter.eq("status", "active")),
            limit=2,
        )
        try:
            rows = await self.db.fetch(spec)
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Membership lookup failed for user {user_id}: {e}")
            return MembershipResolution()

        if not rows:
            return MembershipResolution()

        if len(rows) > 1:
            org_ids = ", ".join(str(row.get("organization_id")) for row in rows)
            logger.error(
                f"User {user_id} has multiple active memberships ({org_ids}); "
                "treating as unaffiliated"
            )
            return MembershipResolution(conflict=True)

        return MembershipResolution(membership=Membership.from_row(rows[0]))

    async def resolve(self, email: Optional[str]) -> PermissionSnapshot:
        """
        Build the full permission snapshot for an identity.

        Module subscriptions and role grants are fetched concurrently once
        the membership is known.
        """
        user = await self.resolve_user(email)
        if user is None:
            return ANONYMOUS

        resolution = await self.resolve_membership(user.id)
        membership = resolution.membership

        modules, grants = await asyncio.gather(
            self.modules.resolve_modules(
                membership.organization_id if membership else None
            ),
            self.roles.resolve_grants(membership.role_id if membership else None),
        )

        return PermissionSnapshot(
            user=user,
            membership=membership,
            membership_conflict=resolution.conflict,
            modules=modules,
            grants=grants,
        )
