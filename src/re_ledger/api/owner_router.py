"""Owner-facing ledger endpoints: all require an OWNER token.

GET    /owner/properties/{property_id}/tenants  tenants with live pending fines
DELETE /owner/tenants/{tenant_id}               unlink a tenant (no reconciliation)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.re_common.database import get_db_session
from src.re_common.response import ApiResponse, success_response
from src.re_gateway.auth.dependencies import Principal, require_owner
from src.re_ledger.api.deps import get_ledger_service
from src.re_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/owner", tags=["owner"])

ServiceDep = Annotated[LedgerApplicationService, Depends(get_ledger_service)]


@router.get("/properties/{property_id}/tenants")
async def list_property_tenants(
    property_id: str,
    principal: Annotated[Principal, Depends(require_owner)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.list_property_tenants(db, principal.user_id, property_id)
    return success_response(data.model_dump(), request)


@router.delete("/tenants/{tenant_id}")
async def remove_tenant(
    tenant_id: str,
    principal: Annotated[Principal, Depends(require_owner)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.remove_tenant(db, principal.user_id, tenant_id)
    return success_response(data.model_dump(), request)
