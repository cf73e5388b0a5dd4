"""
Declarative visibility checks for regions of the dashboard.

A gate only decides what is rendered. Denial here never restricts what the
data API returns; row-level security in the data store is the boundary.
"""

import logging
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from .models import PermissionCheck, PermissionSnapshot
from .services import can, has_module

logger = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F")


class DenyReason(str, Enum):
    PLATFORM_ADMIN_REQUIRED = "platform_admin_required"
    ORGANIZATION_ADMIN_REQUIRED = "organization_admin_required"
    MODULE_NOT_SUBSCRIBED = "module_not_subscribed"
    PERMISSION_MISSING = "permission_missing"


class AccessRequirement(BaseModel):
    """What a gated region needs; every field left unset is not checked."""

    model_config = ConfigDict(frozen=True)

    module: Optional[str] = None
    permission: Optional[PermissionCheck] = None
    require_platform_admin: bool = False
    require_organization_admin: bool = False


class AccessDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: Optional[DenyReason] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = AccessDecision(allowed=True)


def evaluate_access(
    snapshot: Optional[PermissionSnapshot], requirement: AccessRequirement
) -> AccessDecision:
    """
    Evaluate a requirement against a snapshot.

    Checks run in a fixed order and the first failure decides:
    platform admin, organization admin (platform admins satisfy it),
    module subscription, then the fine-grained permission.

    Args:
        snapshot: The current permission snapshot (None when signed out)
        requirement: The requirement of the gated region

    Returns:
        AccessDecision with the failing step as reason when denied
    """
    is_platform_admin = snapshot.is_platform_admin if snapshot else False
    is_org_admin = snapshot.is_organization_admin if snapshot else False

    if requirement.require_platform_admin and not is_platform_admin:
        return AccessDecision(
            allowed=False, reason=DenyReason.PLATFORM_ADMIN_REQUIRED
        )

    if requirement.require_organization_admin and not (
        is_org_admin or is_platform_admin
    ):
        return AccessDecision(
            allowed=False, reason=DenyReason.ORGANIZATION_ADMIN_REQUIRED
        )

    if requirement.module and not has_module(snapshot, requirement.module):
        return AccessDecision(allowed=False, reason=DenyReason.MODULE_NOT_SUBSCRIBED)

    permission = requirement.permission
    if permission and not can(
        snapshot, permission.action, permission.module, permission.resource
    ):
        return AccessDecision(allowed=False, reason=DenyReason.PERMISSION_MISSING)

    return ALLOW


class PermissionGate(Generic[T, F]):
    """
    Renders gated content only when the requirement is met.

    ``children`` is a zero-argument callable; it is called only on allow,
    so content with side effects on construction is never built when
    access is denied.

    Usage:
        gate = PermissionGate(
            AccessRequirement(require_platform_admin=True),
            fallback="Restricted",
        )
        body = gate.render(snapshot, build_admin_panel)
    """

    def __init__(
        self,
        requirement: AccessRequirement,
        fallback: Optional[F] = None,
        unmount_on_deny: bool = False,
    ):
        self.requirement = requirement
        self.fallback = fallback
        self.unmount_on_deny = unmount_on_deny

    def is_allowed(self, snapshot: Optional[PermissionSnapshot]) -> bool:
        return evaluate_access(snapshot, self.requirement).allowed

    def render(
        self, snapshot: Optional[PermissionSnapshot], children: Callable[[], T]
    ) -> "T | F | None":
        decision = evaluate_access(snapshot, self.requirement)
        if decision.allowed:
            return children()

        logger.debug(f"Gate denied: {decision.reason.value}")
        if self.unmount_on_deny:
            return None
        return self.fallback
