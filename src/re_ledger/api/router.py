"""Tenant-facing ledger endpoints: all require a PAYER token.

POST /tenant/link  link to a property by code (idempotent)
GET  /tenant/ledger  deposit balance and history
GET  /tenant/fine-estimate  live fine estimate, read-only
POST /tenant/payments  pay rent; deducts any fine from the deposit
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.re_common.database import get_db_session
from src.re_common.response import ApiResponse, success_response
from src.re_gateway.auth.dependencies import Principal, require_payer
from src.re_ledger.api.deps import get_ledger_service
from src.re_ledger.application.schemas import LedgerResponse, LinkRequest, PaymentResponse
from src.re_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/tenant", tags=["tenant"])

ServiceDep = Annotated[LedgerApplicationService, Depends(get_ledger_service)]


@router.post("/link")
async def link_property(
    body: LinkRequest,
    principal: Annotated[Principal, Depends(require_payer)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    ledger = await service.link(db, principal.user_id, body.property_code)
    return success_response(LedgerResponse.from_domain(ledger).model_dump(), request)


@router.get("/ledger")
async def get_ledger(
    principal: Annotated[Principal, Depends(require_payer)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.get_ledger_view(db, principal.user_id)
    return success_response(data.model_dump(), request)


@router.get("/fine-estimate")
async def get_fine_estimate(
    principal: Annotated[Principal, Depends(require_payer)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.get_fine_view(db, principal.user_id)
    return success_response(data.model_dump(), request)


@router.post("/payments")
async def process_payment(
    principal: Annotated[Principal, Depends(require_payer)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    result = await service.process_payment(db, principal.user_id)
    return success_response(PaymentResponse.from_result(result).model_dump(), request)
