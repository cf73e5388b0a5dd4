"""
Shared permission system for multi-tenant access decisions.

This module provides the permission vocabulary, the exact-match checks, the
declarative permission gate and the operation guard used across all domains.
Route-level guarding lives in ``dependencies`` and is imported from there.

Usage:
    from tenantgate.shared.permissions.dependencies import require_access

    @router.get("/partners")
    async def list_partners(
        session: AuthSession = Depends(require_access(module=ModuleCode.FINANCE))
    ):
        pass
"""

from .gate import AccessRequirement, PermissionGate, evaluate_access
from .guard import OperationGuard
from .models import (
    ModuleCode,
    PermissionAction,
    PermissionCheck,
    PermissionGrant,
    PermissionSnapshot,
)
from .services import can, can_all, can_any, has_module

__all__ = [
    "AccessRequirement",
    "ModuleCode",
    "OperationGuard",
    "PermissionAction",
    "PermissionCheck",
    "PermissionGate",
    "PermissionGrant",
    "PermissionSnapshot",
    "can",
    "can_all",
    "can_any",
    "evaluate_access",
    "has_module",
]
