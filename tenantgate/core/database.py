# tenantgate/core/database.py
import logging
from typing import Optional

from fastapi import HTTPException, status
from supabase import AsyncClient, acreate_client

from tenantgate.core.query import DataGateway
from tenantgate.core.settings import settings

logger = logging.getLogger(__name__)

# Global Supabase client, created during application startup
supabase: Optional[AsyncClient] = None


async def connect() -> Optional[AsyncClient]:
    """Create the shared Supabase client if the data API is configured."""
    global supabase

    key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_KEY
    if not settings.SUPABASE_URL or not key:
        logger.warning("Supabase is not configured; data access is disabled")
        return None

    supabase = await acreate_client(settings.SUPABASE_URL, key)
    return supabase


async def disconnect() -> None:
    global supabase

    if supabase is not None:
        await supabase.postgrest.aclose()
    supabase = None


async def get_db() -> DataGateway:
    """Data gateway dependency for FastAPI dependency injection."""
    if supabase is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Supabase not configured",
        )
    return DataGateway(supabase)
