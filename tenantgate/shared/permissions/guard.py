import logging
from enum import Enum
from functools import wraps
from typing import Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from .models import PermissionAction, PermissionSnapshot
from .services import can, has_module

logger = logging.getLogger(__name__)

R = TypeVar("R")

ACTION_LABELS: dict[PermissionAction, str] = {
    PermissionAction.CREATE: "create",
    PermissionAction.READ: "view",
    PermissionAction.UPDATE: "edit",
    PermissionAction.DELETE: "delete",
}


class GuardResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool
    title: Optional[str] = None
    description: Optional[str] = None


class OperationGuard:
    """
    Permission checks for the data operations of one module resource.

    Usage:
        guard = OperationGuard(snapshot, ModuleCode.CRM, "customers")
        create_customer = guard.wrap(PermissionAction.CREATE, service.create)
    """

    def __init__(
        self,
        snapshot: Optional[PermissionSnapshot],
        module: "str | Enum",
        resource: str,
    ):
        self.snapshot = snapshot
        self.module = module.value if isinstance(module, Enum) else module
        self.resource = resource

    def _can(self, action: PermissionAction) -> bool:
        return can(self.snapshot, action, self.module, self.resource)

    @property
    def can_create(self) -> bool:
        return self._can(PermissionAction.CREATE)

    @property
    def can_read(self) -> bool:
        return self._can(PermissionAction.READ)

    @property
    def can_update(self) -> bool:
        return self._can(PermissionAction.UPDATE)

    @property
    def can_delete(self) -> bool:
        return self._can(PermissionAction.DELETE)

    @property
    def can_modify(self) -> bool:
        return self.can_update or self.can_delete

    @property
    def has_any_access(self) -> bool:
        return any(self._can(action) for action in PermissionAction)

    def check(self, action: "PermissionAction | str") -> GuardResult:
        """Module subscription first, then the action grant."""
        action = PermissionAction(action)

        if not has_module(self.snapshot, self.module):
            return GuardResult(
                allowed=False,
                title="Module not available",
                description=(
                    f"The {self.module} module is not included in your subscription."
                ),
            )

        if not self._can(action):
            return GuardResult(
                allowed=False,
                title="Permission denied",
                description=(
                    f"You don't have permission to "
                    f"{ACTION_LABELS[action]} {self.resource}."
                ),
            )

        return GuardResult(allowed=True)

    def wrap(
        self,
        action: "PermissionAction | str",
        operation: Callable[..., Awaitable[R]],
    ) -> Callable[..., Awaitable[Optional[R]]]:
        """Return a coroutine function that skips ``operation`` when denied."""

        @wraps(operation)
        async def guarded(*args, **kwargs) -> Optional[R]:
            result = self.check(action)
            if not result.allowed:
                logger.info(
                    f"Blocked {PermissionAction(action).value} on "
                    f"{self.module}.{self.resource}: {result.description}"
                )
                return None
            return await operation(*args, **kwargs)

        return guarded
