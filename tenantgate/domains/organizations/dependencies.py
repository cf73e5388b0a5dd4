# tenantgate/domains/organizations/dependencies.py
from fastapi import Depends

from tenantgate.domains.auth.context import (
    AdminContextSwitcher,
    AuthSession,
    SessionRegistry,
)
from tenantgate.domains.auth.dependencies import (
    get_context_switcher,
    get_current_session,
    get_session_registry,
)


async def get_org_scoped_session(
    org_slug: str,
    session: AuthSession = Depends(get_current_session),
    switcher: AdminContextSwitcher = Depends(get_context_switcher),
    registry: SessionRegistry = Depends(get_session_registry),
) -> AuthSession:
    """
    Enter the organization named by the route's slug before the endpoint runs.

    Raises:
        OrgScopeRedirect: If the caller is not a platform admin or the slug
            matches no organization
    """
    updated = await switcher.enter_organization_scope(session, org_slug)
    if updated is not session:
        registry.put(updated)
    return updated
