# tenantgate/domains/modules/routes.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tenantgate.core.database import get_db
from tenantgate.core.query import DataGateway
from tenantgate.domains.auth.context import AuthSession
from tenantgate.domains.modules.service import ModuleSubscriptionService
from tenantgate.shared.permissions.dependencies import require_access

router = APIRouter(prefix="/admin/modules", tags=["Modules"])


@router.get("", operation_id="listModules")
async def list_modules(
    session: AuthSession = Depends(require_access(require_platform_admin=True)),
    db: DataGateway = Depends(get_db),
) -> List[Dict[str, Any]]:
    """The module catalogue organizations can subscribe to."""
    service = ModuleSubscriptionService(db)
    return await service.list_modules()
