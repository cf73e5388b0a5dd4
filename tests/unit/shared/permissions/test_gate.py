"""
Tests for the permission gate in tenantgate/shared/permissions/gate.py
"""

from typing import List

import pytest

from tenantgate.core.query import ScopedQuerySpec
from tenantgate.domains.auth.context import AuthSession
from tenantgate.domains.partners.service import PartnerService
from tenantgate.shared.permissions.gate import (
    AccessRequirement,
    DenyReason,
    PermissionGate,
    evaluate_access,
)
from tenantgate.shared.permissions.models import PermissionCheck, PermissionSnapshot
from tests.fixtures.auth_fixtures import SnapshotFactory
from tests.fixtures.gateway_fixtures import ACME_ID, InMemoryGateway


def crm_create() -> PermissionCheck:
    return PermissionCheck(action="create", module="crm", resource="customers")


class TestEvaluateAccess:
    """Test the fixed evaluation order of the gate."""

    def test_empty_requirement_allows_everyone(self, alice_snapshot):
        assert evaluate_access(alice_snapshot, AccessRequirement()).allowed
        assert evaluate_access(None, AccessRequirement()).allowed

    def test_platform_admin_required(self, alice_snapshot, platform_admin_snapshot):
        requirement = AccessRequirement(require_platform_admin=True)

        denied = evaluate_access(alice_snapshot, requirement)
        assert denied.allowed is False
        assert denied.reason == DenyReason.PLATFORM_ADMIN_REQUIRED

        assert evaluate_access(platform_admin_snapshot, requirement).allowed

    def test_organization_admin_required(
        self, alice_snapshot, org_admin_snapshot, platform_admin_snapshot
    ):
        requirement = AccessRequirement(require_organization_admin=True)

        denied = evaluate_access(alice_snapshot, requirement)
        assert denied.reason == DenyReason.ORGANIZATION_ADMIN_REQUIRED

        assert evaluate_access(org_admin_snapshot, requirement).allowed
        # Platform admins satisfy organization-admin-or-higher checks
        assert evaluate_access(platform_admin_snapshot, requirement).allowed

    def test_module_required(self, alice_snapshot):
        assert evaluate_access(alice_snapshot, AccessRequirement(module="crm"))

        denied = evaluate_access(alice_snapshot, AccessRequirement(module="finance"))
        assert denied.reason == DenyReason.MODULE_NOT_SUBSCRIBED

    def test_permission_required(self, alice_snapshot):
        assert evaluate_access(
            alice_snapshot, AccessRequirement(permission=crm_create())
        ).allowed

        denied = evaluate_access(
            alice_snapshot,
            AccessRequirement(
                permission=PermissionCheck(
                    action="delete", module="crm", resource="customers"
                )
            ),
        )
        assert denied.reason == DenyReason.PERMISSION_MISSING

    def test_first_failing_step_decides(self):
        snapshot = SnapshotFactory.snapshot(modules=(), grants=())
        requirement = AccessRequirement(
            require_platform_admin=True,
            require_organization_admin=True,
            module="crm",
            permission=crm_create(),
        )
        assert (
            evaluate_access(snapshot, requirement).reason
            == DenyReason.PLATFORM_ADMIN_REQUIRED
        )

        requirement = AccessRequirement(module="crm", permission=crm_create())
        assert (
            evaluate_access(snapshot, requirement).reason
            == DenyReason.MODULE_NOT_SUBSCRIBED
        )

    def test_platform_admin_still_needs_module_and_grant(
        self, platform_admin_snapshot
    ):
        requirement = AccessRequirement(
            require_platform_admin=True, module="crm", permission=crm_create()
        )
        decision = evaluate_access(platform_admin_snapshot, requirement)
        assert decision.reason == DenyReason.MODULE_NOT_SUBSCRIBED

    def test_signed_out_is_denied(self):
        decision = evaluate_access(None, AccessRequirement(module="crm"))
        assert decision.allowed is False


class TestPermissionGate:
    """Test gate rendering and the mount behavior of gated children."""

    def test_renders_children_when_allowed(self, platform_admin_snapshot):
        gate = PermissionGate(
            AccessRequirement(require_platform_admin=True), fallback="no"
        )
        assert gate.render(platform_admin_snapshot, lambda: "admin panel") == (
            "admin panel"
        )

    def test_denied_renders_fallback_without_mounting(
        self, alice_snapshot: PermissionSnapshot
    ):
        mounted: List[str] = []

        def child() -> str:
            mounted.append("child")
            return "admin panel"

        gate = PermissionGate(
            AccessRequirement(require_platform_admin=True),
            fallback="Restricted",
        )

        assert gate.render(alice_snapshot, child) == "Restricted"
        assert mounted == []

    def test_default_fallback_is_nothing(self, alice_snapshot):
        gate = PermissionGate(AccessRequirement(module="finance"))
        assert gate.render(alice_snapshot, lambda: "finance") is None

    def test_unmount_on_deny_omits_fallback(self, alice_snapshot):
        mounted: List[str] = []
        gate = PermissionGate(
            AccessRequirement(module="finance"),
            fallback="Upgrade to use finance",
            unmount_on_deny=True,
        )

        assert gate.render(alice_snapshot, lambda: mounted.append("x")) is None
        assert mounted == []

    def test_is_allowed(self, alice_snapshot):
        assert PermissionGate(AccessRequirement(module="crm")).is_allowed(
            alice_snapshot
        )


class TestGateIsNotADataBoundary:
    """Denial by the gate changes rendering only; queries are unaffected."""

    @pytest.mark.asyncio
    async def test_denied_gate_does_not_change_scoped_queries(
        self, gateway: InMemoryGateway, alice_snapshot: PermissionSnapshot
    ):
        session = AuthSession(identity="alice@co.com", snapshot=alice_snapshot)
        gate = PermissionGate(AccessRequirement(module="finance"))
        assert gate.is_allowed(alice_snapshot) is False

        count = await PartnerService(gateway).count_active_partners(session.scope())

        # Only the data store's own policies restrict the read
        assert count == 1
        spec = gateway.queries[-1]
        assert isinstance(spec, ScopedQuerySpec)
        assert spec.scope.organization_id == ACME_ID
