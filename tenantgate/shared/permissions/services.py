from enum import Enum
from typing import Iterable, Optional

from .models import (
    PermissionAction,
    PermissionCheck,
    PermissionGrant,
    PermissionSnapshot,
)


def has_module(snapshot: Optional[PermissionSnapshot], module: "str | Enum") -> bool:
    """
    Check if the snapshot's organization subscribes to a module.

    Access is closed-world: only an active subscription grants it.

    Args:
        snapshot: The current permission snapshot (None when signed out)
        module: Module code to check

    Returns:
        True if the module is in the active subscription set, False otherwise
    """
    if snapshot is None:
        return False
    code = module.value if isinstance(module, Enum) else module
    return code in snapshot.modules


def can(
    snapshot: Optional[PermissionSnapshot],
    action: "PermissionAction | str",
    module: "str | Enum",
    resource: str,
) -> bool:
    """
    Check if the snapshot's role grants exactly (action, module, resource).

    There is no wildcard, hierarchy or owner bypass; admin overrides belong
    to the permission gate.
    """
    if snapshot is None:
        return False
    return PermissionGrant.of(action, module, resource) in snapshot.grants


def can_all(
    snapshot: Optional[PermissionSnapshot], checks: Iterable[PermissionCheck]
) -> bool:
    """True if every check passes."""
    return all(can(snapshot, c.action, c.module, c.resource) for c in checks)


def can_any(
    snapshot: Optional[PermissionSnapshot], checks: Iterable[PermissionCheck]
) -> bool:
    """True if at least one check passes."""
    return any(can(snapshot, c.action, c.module, c.resource) for c in checks)
