from typing import Awaitable, Callable, Optional

from fastapi import Depends

from tenantgate.domains.auth.context import AuthSession
from tenantgate.domains.auth.dependencies import get_current_session
from tenantgate.shared.exceptions import NotAuthorizedError

from .gate import AccessRequirement, DenyReason, evaluate_access
from .models import ModuleCode, PermissionAction, PermissionCheck

DENY_MESSAGES: dict[DenyReason, str] = {
    DenyReason.PLATFORM_ADMIN_REQUIRED: "Platform administrator access required",
    DenyReason.ORGANIZATION_ADMIN_REQUIRED: (
        "Organization administrator access required"
    ),
    DenyReason.MODULE_NOT_SUBSCRIBED: "Module not included in subscription",
    DenyReason.PERMISSION_MISSING: "Insufficient permissions",
}


def require_access(
    module: Optional["ModuleCode | str"] = None,
    permission: Optional[
        tuple["PermissionAction | str", "ModuleCode | str", str]
    ] = None,
    require_platform_admin: bool = False,
    require_organization_admin: bool = False,
) -> Callable[..., Awaitable[AuthSession]]:
    """
    Dependency factory for gated endpoints.

    Creates a dependency that evaluates the permission gate against the
    current session before the endpoint runs.

    Args:
        module: Module the organization must subscribe to
        permission: (action, module, resource) the user's role must grant
        require_platform_admin: Only platform administrators pass
        require_organization_admin: Organization or platform administrators pass

    Returns:
        Async dependency function that validates access and returns the session
    """
    check = None
    if permission is not None:
        action, perm_module, resource = permission
        check = PermissionCheck(
            action=action,
            module=getattr(perm_module, "value", perm_module),
            resource=resource,
        )

    requirement = AccessRequirement(
        module=getattr(module, "value", module),
        permission=check,
        require_platform_admin=require_platform_admin,
        require_organization_admin=require_organization_admin,
    )

    async def check_access(
        session: AuthSession = Depends(get_current_session),
    ) -> AuthSession:
        """
        Validate the session satisfies the requirement.

        Raises:
            NotAuthorizedError: If the gate denies access
        """
        decision = evaluate_access(session.snapshot, requirement)
        if not decision.allowed:
            detail = DENY_MESSAGES[decision.reason]
            if decision.reason == DenyReason.PERMISSION_MISSING and check:
                detail = (
                    f"{detail}: {check.action.value} "
                    f"{check.module}.{check.resource} required"
                )
            raise NotAuthorizedError(detail)
        return session

    return check_access
