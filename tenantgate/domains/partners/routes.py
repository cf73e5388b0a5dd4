# tenantgate/domains/partners/routes.py
from typing import List

from fastapi import APIRouter, Depends, status

from tenantgate.core.database import get_db
from tenantgate.core.query import DataGateway
from tenantgate.domains.auth.context import AuthSession
from tenantgate.domains.partners.models import (
    PartnerInvite,
    PartnerResponse,
    PartnerStats,
)
from tenantgate.domains.partners.service import PartnerService
from tenantgate.shared.permissions import ModuleCode, PermissionAction
from tenantgate.shared.permissions.dependencies import require_access

router = APIRouter(prefix="/partners", tags=["Partners"])


@router.get("/stats", response_model=PartnerStats, operation_id="getPartnerStats")
async def get_partner_stats(
    session: AuthSession = Depends(require_access(module=ModuleCode.FINANCE)),
    db: DataGateway = Depends(get_db),
) -> PartnerStats:
    """Active partner count of the effective organization."""
    service = PartnerService(db)
    return PartnerStats(
        active_partners=await service.count_active_partners(session.scope())
    )


@router.get("", response_model=List[PartnerResponse], operation_id="listPartners")
async def list_partners(
    session: AuthSession = Depends(require_access(module=ModuleCode.FINANCE)),
    db: DataGateway = Depends(get_db),
) -> List[PartnerResponse]:
    service = PartnerService(db)
    return await service.list_partners(session.scope())


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    operation_id="invitePartner",
)
async def invite_partner(
    invite: PartnerInvite,
    session: AuthSession = Depends(
        require_access(
            module=ModuleCode.FINANCE,
            permission=(PermissionAction.CREATE, ModuleCode.FINANCE, "partners"),
        )
    ),
    db: DataGateway = Depends(get_db),
) -> dict:
    """
    Invite another organization as a partner of the effective organization.
    """
    service = PartnerService(db)
    return await service.invite_partner(session.scope(), invite)
