# tenantgate/domains/auth/routes.py
from typing import List

from fastapi import APIRouter, Depends, status

from tenantgate.core.database import get_db
from tenantgate.core.query import DataGateway
from tenantgate.domains.auth.context import (
    AdminContextSwitcher,
    AuthSession,
    SessionRegistry,
)
from tenantgate.domains.auth.dependencies import (
    get_context_switcher,
    get_current_session,
    get_identity,
    get_session_registry,
)
from tenantgate.domains.auth.models import GrantResponse, SessionState
from tenantgate.domains.auth.service import SessionResolver
from tenantgate.shared.navigation import NavSection, filter_navigation

router = APIRouter(prefix="/session", tags=["Sessions"])


def build_session_state(session: AuthSession) -> SessionState:
    snapshot = session.snapshot
    user = snapshot.user
    membership = snapshot.membership
    organization = membership.organization if membership else None
    position = membership.position if membership else None

    return SessionState(
        user_id=user.id if user else None,
        user_email=user.email if user else None,
        user_name=user.name if user else None,
        organization_id=snapshot.organization_id,
        organization_name=organization.name if organization else None,
        organization_slug=organization.slug if organization else None,
        position_name=position.name if position else None,
        is_platform_admin=snapshot.is_platform_admin,
        is_organization_admin=snapshot.is_organization_admin,
        membership_conflict=snapshot.membership_conflict,
        modules=sorted(snapshot.modules),
        permissions=[
            GrantResponse(
                module=grant.module, resource=grant.resource, action=grant.action.value
            )
            for grant in sorted(
                snapshot.grants, key=lambda g: (g.module, g.resource, g.action.value)
            )
        ],
        admin_selected_organization=session.admin_selected_org,
        effective_organization_id=session.effective_organization_id,
    )


@router.get("", response_model=SessionState, operation_id="getSessionState")
async def get_session_state(
    session: AuthSession = Depends(get_current_session),
) -> SessionState:
    return build_session_state(session)


@router.post(
    "/refresh", response_model=SessionState, operation_id="refreshSessionState"
)
async def refresh_session_state(
    identity: str = Depends(get_identity),
    db: DataGateway = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionState:
    """
    Drop the cached session and resolve it again from the data API.

    Any admin organization selection is discarded with the old session.
    """
    registry.clear(identity)
    snapshot = await SessionResolver(db).resolve(identity)
    session = registry.put(
        AuthSession(identity=identity, snapshot=snapshot, resolved_at=registry.now())
    )
    return build_session_state(session)


@router.delete(
    "", status_code=status.HTTP_204_NO_CONTENT, operation_id="endSession"
)
async def end_session(
    identity: str = Depends(get_identity),
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    registry.clear(identity)


@router.post(
    "/admin-context/{organization_id}",
    response_model=SessionState,
    operation_id="setAdminOrgContext",
)
async def set_admin_org_context(
    organization_id: str,
    session: AuthSession = Depends(get_current_session),
    switcher: AdminContextSwitcher = Depends(get_context_switcher),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionState:
    """
    Select the organization a platform administrator is viewing.

    Callers that are not platform administrators get their unchanged
    session back.
    """
    updated = await switcher.set_admin_org_context(session, organization_id)
    if updated is not session:
        registry.put(updated)
    return build_session_state(updated)


@router.delete(
    "/admin-context",
    response_model=SessionState,
    operation_id="clearAdminOrgContext",
)
async def clear_admin_org_context(
    session: AuthSession = Depends(get_current_session),
    switcher: AdminContextSwitcher = Depends(get_context_switcher),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionState:
    updated = await switcher.set_admin_org_context(session, None)
    if updated is not session:
        registry.put(updated)
    return build_session_state(updated)


@router.post(
    "/navigation",
    response_model=List[NavSection],
    operation_id="filterNavigation",
)
async def filter_session_navigation(
    sections: List[NavSection],
    session: AuthSession = Depends(get_current_session),
) -> List[NavSection]:
    """Return the given navigation tree reduced to what the session may see."""
    return filter_navigation(sections, session.snapshot)
