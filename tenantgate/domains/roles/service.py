# tenantgate/domains/roles/service.py
import logging
from typing import Optional

import httpx
from postgrest.exceptions import APIError

from tenantgate.core.query import DataGateway, Filter, QuerySpec
from tenantgate.shared.permissions.models import ACTION_COLUMNS, PermissionGrant

logger = logging.getLogger(__name__)


class RolePermissionService:
    """Resolves the permission grants attached to a role."""

    def __init__(self, db: DataGateway):
        self.db = db

    async def resolve_grants(
        self, role_id: Optional[str]
    ) -> frozenset[PermissionGrant]:
        """
        Get every (module, resource, action) grant of a role.

        Each role_permissions row covers one module resource; every true
        ``can_*`` flag on it becomes one grant.

        Args:
            role_id: Role to look up; None or empty yields no grants

        Returns:
            Frozen set of grants, empty when the role has none or the lookup failed
        """
        if not role_id:
            return frozenset()

        spec = QuerySpec(
            table="role_permissions",
            columns=("module_code", "resource_type", *ACTION_COLUMNS),
            filters=(Filter.eq("role_id", role_id),),
        )

        try:
            rows = await self.db.fetch(spec)
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Permission lookup failed for role {role_id}: {e}")
            return frozenset()

        grants = set()
        for row in rows:
            module = row.get("module_code")
            resource = row.get("resource_type")
            if not module or not resource:
                continue
            for column, action in ACTION_COLUMNS.items():
                if row.get(column):
                    grants.add(
                        PermissionGrant(module=module, resource=resource, action=action)
                    )
        return frozenset(grants)
