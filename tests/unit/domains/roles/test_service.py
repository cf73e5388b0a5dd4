"""
Tests for RolePermissionService.
"""

import pytest

from tenantgate.domains.roles.service import RolePermissionService
from tenantgate.shared.permissions.models import PermissionAction, PermissionGrant
from tests.fixtures.gateway_fixtures import ROLE_ADMIN_ID, InMemoryGateway


class TestResolveGrants:
    """Test expansion of role permission rows into grants."""

    @pytest.mark.asyncio
    async def test_each_true_flag_is_one_grant(self, gateway: InMemoryGateway):
        gateway.tables["role_permissions"].append(
            {
                "id": "rp-2",
                "role_id": ROLE_ADMIN_ID,
                "module_code": "bookings",
                "resource_type": "tours",
                "can_create": False,
                "can_read": True,
                "can_update": True,
                "can_delete": False,
            }
        )

        grants = await RolePermissionService(gateway).resolve_grants(ROLE_ADMIN_ID)

        assert grants == frozenset(
            {
                PermissionGrant.of("create", "crm", "customers"),
                PermissionGrant.of("read", "bookings", "tours"),
                PermissionGrant.of(PermissionAction.UPDATE, "bookings", "tours"),
            }
        )

    @pytest.mark.asyncio
    async def test_rows_of_other_roles_are_ignored(self, gateway: InMemoryGateway):
        service = RolePermissionService(gateway)
        assert await service.resolve_grants("role-x") == frozenset()

    @pytest.mark.asyncio
    async def test_incomplete_rows_are_skipped(self, gateway: InMemoryGateway):
        gateway.tables["role_permissions"] = [
            {
                "id": "rp-9",
                "role_id": ROLE_ADMIN_ID,
                "module_code": "crm",
                "can_read": True,
            }
        ]
        service = RolePermissionService(gateway)
        assert await service.resolve_grants(ROLE_ADMIN_ID) == frozenset()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role_id", [None, ""])
    async def test_no_role(self, gateway: InMemoryGateway, role_id):
        service = RolePermissionService(gateway)
        assert await service.resolve_grants(role_id) == frozenset()
        assert gateway.queries == []

    @pytest.mark.asyncio
    async def test_failure_resolves_to_no_grants(self, gateway: InMemoryGateway):
        gateway.fail_on("role_permissions")
        assert (
            await RolePermissionService(gateway).resolve_grants(ROLE_ADMIN_ID)
            == frozenset()
        )
