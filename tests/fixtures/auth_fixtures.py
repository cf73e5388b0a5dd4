"""
Test fixtures and factories for session and permission test data.
"""

from typing import Iterable, Optional

import pytest

from tenantgate.domains.auth.context import AuthSession, SessionRegistry
from tenantgate.domains.auth.models import Membership, StaffPosition, User
from tenantgate.domains.organizations.models import Organization
from tenantgate.shared.permissions.models import PermissionGrant, PermissionSnapshot

from .gateway_fixtures import ACME_ID, ROLE_ADMIN_ID


class SnapshotFactory:
    """Helper class for building permission snapshots without the data API."""

    @staticmethod
    def user(
        email: str = "alice@co.com",
        platform_admin: bool = False,
        user_id: str = "user-alice",
    ) -> User:
        return User(
            id=user_id,
            email=email,
            name=email.split("@")[0].title(),
            is_platform_super_admin=platform_admin,
        )

    @staticmethod
    def membership(
        organization_id: str = ACME_ID,
        owner: bool = False,
        role_id: Optional[str] = ROLE_ADMIN_ID,
        user_id: str = "user-alice",
    ) -> Membership:
        return Membership(
            id=f"member-{user_id}",
            user_id=user_id,
            organization_id=organization_id,
            is_organization_owner=owner,
            primary_position_id="pos-admin",
            organization=Organization(
                id=organization_id, name="Acme", slug="acme", status="active"
            ),
            position=StaffPosition(
                id="pos-admin", name="Admin", default_role_id=role_id
            ),
        )

    @classmethod
    def snapshot(
        cls,
        modules: Iterable[str] = ("crm",),
        grants: Iterable[tuple] = (("create", "crm", "customers"),),
        platform_admin: bool = False,
        organization_admin: bool = False,
        affiliated: bool = True,
        email: str = "alice@co.com",
    ) -> PermissionSnapshot:
        user_id = f"user-{email.split('@')[0]}"
        return PermissionSnapshot(
            user=cls.user(email=email, platform_admin=platform_admin, user_id=user_id),
            membership=(
                cls.membership(owner=organization_admin, user_id=user_id)
                if affiliated
                else None
            ),
            modules=frozenset(modules),
            grants=frozenset(PermissionGrant.of(*g) for g in grants),
        )


@pytest.fixture
def alice_snapshot() -> PermissionSnapshot:
    """Acme "Admin" position holder with (create, crm, customers)."""
    return SnapshotFactory.snapshot()


@pytest.fixture
def org_admin_snapshot() -> PermissionSnapshot:
    return SnapshotFactory.snapshot(
        email="owner@co.com", organization_admin=True, grants=()
    )


@pytest.fixture
def platform_admin_snapshot() -> PermissionSnapshot:
    """Platform admin with no membership, modules or grants of their own."""
    return SnapshotFactory.snapshot(
        email="root@co.com",
        platform_admin=True,
        affiliated=False,
        modules=(),
        grants=(),
    )


@pytest.fixture
def alice_session(
    alice_snapshot: PermissionSnapshot, clock: "ManualClock"
) -> AuthSession:
    return AuthSession(
        identity="alice@co.com", snapshot=alice_snapshot, resolved_at=clock()
    )


@pytest.fixture
def platform_admin_session(
    platform_admin_snapshot: PermissionSnapshot, clock: "ManualClock"
) -> AuthSession:
    return AuthSession(
        identity="root@co.com", snapshot=platform_admin_snapshot, resolved_at=clock()
    )


SESSION_TTL = 300.0


class ManualClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def registry(clock: ManualClock) -> SessionRegistry:
    return SessionRegistry(ttl_seconds=SESSION_TTL, clock=clock)
