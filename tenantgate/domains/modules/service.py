# tenantgate/domains/modules/service.py
import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError

from tenantgate.core.query import DataGateway, Embed, Filter, OrderBy, QuerySpec

logger = logging.getLogger(__name__)


class ModuleSubscriptionService:
    """Resolves which feature modules an organization is entitled to."""

    def __init__(self, db: DataGateway):
        self.db = db

    async def resolve_modules(self, organization_id: Optional[str]) -> frozenset[str]:
        """
        Get the codes of all modules with an active subscription.

        Args:
            organization_id: Organization to look up; None or empty yields no modules

        Returns:
            Frozen set of module codes, empty when nothing is subscribed or the
            lookup failed
        """
        if not organization_id:
            return frozenset()

        spec = QuerySpec(
            table="organization_subscriptions",
            columns=("id",),
            embeds=(
                Embed(table="modules", foreign_key="module_id", columns=("code",)),
            ),
            filters=(
                Filter.eq("organization_id", organization_id),
                Filter.eq("status", "active"),
            ),
        )

        try:
            rows = await self.db.fetch(spec)
        except (APIError, httpx.HTTPError) as e:
            logger.error(
                f"Subscription lookup failed for organization {organization_id}: {e}"
            )
            return frozenset()

        codes = set()
        for row in rows:
            module = row.get("modules") or {}
            if module.get("code"):
                codes.add(module["code"])
        return frozenset(codes)

    async def list_modules(self) -> list[dict[str, Any]]:
        """The module catalogue, ordered by name."""
        spec = QuerySpec(
            table="modules",
            columns=("id", "code", "name", "description", "is_active"),
            order=OrderBy(column="name"),
        )
        return await self.db.fetch(spec)
