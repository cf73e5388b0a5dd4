# tenantgate/domains/auth/dependencies.py
import logging
from typing import Any

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt import PyJWKClient

from tenantgate.core.database import get_db
from tenantgate.core.query import DataGateway
from tenantgate.core.settings import settings
from tenantgate.domains.auth.context import (
    AdminContextSwitcher,
    AuthSession,
    SessionRegistry,
    session_registry,
)
from tenantgate.domains.auth.service import SessionResolver
from tenantgate.shared.exceptions import InvalidTokenError, UnknownIdentityError

from .types import SupabaseJwtPayload

logger = logging.getLogger(__name__)

JWKS_URL = f"{settings.SUPABASE_URL}/auth/v1/jwks" if settings.SUPABASE_URL else None

_jwks_client = PyJWKClient(JWKS_URL) if JWKS_URL else None


def _verification_key(token: str) -> tuple[Any, str]:
    # Shared secret in development, the project's JWKS otherwise
    if settings.JWT_SECRET:
        return settings.JWT_SECRET, "HS256"

    if not _jwks_client:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Supabase not configured",
        )
    return _jwks_client.get_signing_key_from_jwt(token).key, "RS256"


def decode_supabase_jwt(token: str) -> SupabaseJwtPayload:
    """
    Verify a Supabase access token and return its claims.

    Raises:
        InvalidTokenError: If the signature, expiry or format is invalid
    """
    try:
        key, algorithm = _verification_key(token)
        payload = jwt.decode(
            token, key, algorithms=[algorithm], options={"verify_aud": False}
        )
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected access token: {e}")
        raise InvalidTokenError()

    return SupabaseJwtPayload(**dict(payload))


def get_identity(authorization: str = Header(None)) -> str:
    """
    Extracts and validates the Supabase JWT from the Authorization header.
    Returns the email the session is keyed by.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidTokenError()

    token = authorization.split(" ")[1]
    identity = decode_supabase_jwt(token).identity
    if not identity:
        raise UnknownIdentityError()
    return identity


def get_session_registry() -> SessionRegistry:
    return session_registry


async def get_current_session(
    identity: str = Depends(get_identity),
    db: DataGateway = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
) -> AuthSession:
    """
    Current session of the authenticated identity.

    The session is resolved on first use and again once it is older than the
    registry's TTL. A platform admin's organization selection survives the
    re-resolution as long as they are still a platform admin.
    """
    cached = registry.get(identity)
    if cached is not None and not registry.is_expired(cached):
        return cached

    snapshot = await SessionResolver(db).resolve(identity)
    session = AuthSession(
        identity=identity, snapshot=snapshot, resolved_at=registry.now()
    )
    if cached is not None and cached.admin_selected_org is not None:
        session = await AdminContextSwitcher(db).set_admin_org_context(
            session, cached.admin_selected_org.id
        )
    registry.put(session)

    logger.info(
        f"Resolved session for {identity}: "
        f"organization={snapshot.organization_id} "
        f"modules={sorted(snapshot.modules)}"
    )
    return session


def get_context_switcher(db: DataGateway = Depends(get_db)) -> AdminContextSwitcher:
    return AdminContextSwitcher(db)
