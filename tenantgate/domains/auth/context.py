"""
Per-identity session context and platform admin organization switching.

An ``AuthSession`` is built once per signed-in identity and handed to every
consumer. It is never edited in place: switching the admin organization or
refreshing the identity produces a new session that replaces the old one
in the ``SessionRegistry``.
"""

import logging
import time
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from tenantgate.core.query import DataGateway, OrganizationScope
from tenantgate.core.settings import settings
from tenantgate.domains.modules.service import ModuleSubscriptionService
from tenantgate.domains.organizations.models import Organization
from tenantgate.domains.organizations.service import OrganizationService
from tenantgate.shared.exceptions import NoOrganizationContextError, OrgScopeRedirect
from tenantgate.shared.permissions.models import PermissionSnapshot

logger = logging.getLogger(__name__)


class AuthSession(BaseModel):
    """The permission snapshot plus the admin-selected organization, if any."""

    model_config = ConfigDict(frozen=True)

    identity: str
    snapshot: PermissionSnapshot
    admin_selected_org: Optional[Organization] = None
    # Monotonic clock reading taken when the snapshot was resolved
    resolved_at: float = Field(default_factory=time.monotonic)

    @property
    def effective_organization_id(self) -> Optional[str]:
        """Organization every data query of this session is scoped to."""
        if self.admin_selected_org is not None:
            return self.admin_selected_org.id
        return self.snapshot.organization_id

    def scope(self, column: str = "organization_id") -> OrganizationScope:
        """
        Organization scope for queries issued on behalf of this session.

        Raises:
            NoOrganizationContextError: If the session has no organization
        """
        organization_id = self.effective_organization_id
        if not organization_id:
            raise NoOrganizationContextError()
        return OrganizationScope(organization_id=organization_id, column=column)


class SessionRegistry:
    """
    Holds the current session of each identity.

    A session older than ``ttl_seconds`` is stale: ``get`` still returns it
    so the caller can carry its admin selection over, but it must be
    resolved again before use. Stale entries are pruned on every ``put``.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: dict[str, AuthSession] = {}
        self.ttl_seconds = (
            settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        )
        self.clock = clock

    def now(self) -> float:
        return self.clock()

    def is_expired(self, session: AuthSession) -> bool:
        return self.clock() - session.resolved_at >= self.ttl_seconds

    def get(self, identity: str) -> Optional[AuthSession]:
        return self._sessions.get(identity)

    def put(self, session: AuthSession) -> AuthSession:
        self._prune()
        self._sessions[session.identity] = session
        return session

    def _prune(self) -> None:
        expired = [
            identity
            for identity, session in self._sessions.items()
            if self.is_expired(session)
        ]
        for identity in expired:
            del self._sessions[identity]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired sessions")

    def clear(self, identity: str) -> None:
        """Sign-out teardown."""
        self._sessions.pop(identity, None)

    def invalidate(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


session_registry = SessionRegistry()


class AdminContextSwitcher:
    """Lets platform administrators view data of any organization."""

    def __init__(self, db: DataGateway):
        self.db = db
        self.organizations = OrganizationService(db)
        self.modules = ModuleSubscriptionService(db)

    async def set_admin_org_context(
        self, session: AuthSession, organization_id: Optional[str]
    ) -> AuthSession:
        """
        Select (or clear, with None) the organization a platform admin views.

        Non-admin callers and unknown organizations leave the session as it
        was. On success a new session is returned whose module set belongs to
        the effective organization.

        Args:
            session: The caller's current session
            organization_id: Organization to view, or None to clear

        Returns:
            The resulting session (the same object when nothing changed)
        """
        if not session.snapshot.is_platform_admin:
            logger.info(
                f"Ignoring organization context change by non-admin {session.identity}"
            )
            return session

        if organization_id is None:
            if session.admin_selected_org is None:
                return session
            return await self._rebuild(session, None)

        organization = await self.organizations.get_by_id(organization_id)
        if organization is None:
            logger.warning(
                f"Admin {session.identity} selected unknown organization "
                f"{organization_id}"
            )
            return session

        return await self._rebuild(session, organization)

    async def enter_organization_scope(
        self, session: AuthSession, slug: str
    ) -> AuthSession:
        """
        Resolve an organization-scoped route's slug and switch to it.

        Raises:
            OrgScopeRedirect: To the home path for non-admins, or to the
                organization list when the slug matches no organization
        """
        if not session.snapshot.is_platform_admin:
            raise OrgScopeRedirect(settings.HOME_PATH)

        selected = session.admin_selected_org
        if selected is not None and selected.slug == slug:
            return session

        organization = await self.organizations.get_by_slug(slug)
        if organization is None:
            logger.warning(f"Organization not found for slug {slug}")
            raise OrgScopeRedirect(settings.ORGANIZATION_LIST_PATH)

        return await self._rebuild(session, organization)

    async def _rebuild(
        self, session: AuthSession, organization: Optional[Organization]
    ) -> AuthSession:
        snapshot = session.snapshot
        organization_id = organization.id if organization else snapshot.organization_id
        modules = await self.modules.resolve_modules(organization_id)

        return AuthSession(
            identity=session.identity,
            snapshot=snapshot.model_copy(update={"modules": modules}),
            admin_selected_org=organization,
            resolved_at=session.resolved_at,
        )
