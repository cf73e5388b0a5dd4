# tenantgate/domains/organizations/routes.py
from typing import List

from fastapi import APIRouter, Depends, status

from tenantgate.core.database import get_db
from tenantgate.core.query import DataGateway
from tenantgate.domains.auth.context import AuthSession
from tenantgate.domains.organizations.dependencies import get_org_scoped_session
from tenantgate.domains.organizations.models import (
    Organization,
    OrganizationCreate,
    OrganizationMemberResponse,
    OrganizationOverview,
)
from tenantgate.domains.organizations.service import OrganizationService
from tenantgate.domains.partners.service import PartnerService
from tenantgate.shared.permissions.dependencies import require_access

admin_router = APIRouter(prefix="/admin/organizations", tags=["Organizations"])

router = APIRouter(prefix="/org/{org_slug}", tags=["Organizations"])


@admin_router.get(
    "",
    response_model=List[Organization],
    operation_id="listOrganizations",
)
async def list_organizations(
    active_only: bool = True,
    session: AuthSession = Depends(require_access(require_platform_admin=True)),
    db: DataGateway = Depends(get_db),
) -> List[Organization]:
    """
    List organizations for the platform admin organization picker.
    """
    service = OrganizationService(db)
    if active_only:
        return await service.list_active()
    return await service.list_all()


@admin_router.post(
    "",
    response_model=Organization,
    status_code=status.HTTP_201_CREATED,
    operation_id="createOrganization",
)
async def create_organization(
    organization_data: OrganizationCreate,
    session: AuthSession = Depends(require_access(require_platform_admin=True)),
    db: DataGateway = Depends(get_db),
) -> Organization:
    service = OrganizationService(db)
    return await service.create_organization(organization_data)


@router.get(
    "",
    response_model=OrganizationOverview,
    operation_id="getOrganizationOverview",
)
async def get_organization_overview(
    session: AuthSession = Depends(get_org_scoped_session),
    db: DataGateway = Depends(get_db),
) -> OrganizationOverview:
    """
    Overview of the organization a platform admin entered through its slug.

    Unknown slugs redirect to the organization list; callers that are not
    platform admins are redirected home.
    """
    scope = session.scope()
    partners = PartnerService(db)
    return OrganizationOverview(
        organization=session.admin_selected_org,
        effective_organization_id=scope.organization_id,
        modules=sorted(session.snapshot.modules),
        active_partners=await partners.count_active_partners(scope),
    )


@router.get(
    "/members",
    response_model=List[OrganizationMemberResponse],
    operation_id="getOrganizationMembers",
)
async def get_organization_members(
    session: AuthSession = Depends(get_org_scoped_session),
    db: DataGateway = Depends(get_db),
) -> List[OrganizationMemberResponse]:
    service = OrganizationService(db)
    return await service.get_organization_members(session.scope())
