"""Fine escalation schedule: public, stateless.

GET /fines/schedule?days=N  first N cycle days and the fine each would carry
"""

from fastapi import APIRouter, Query, Request

from src.re_common.response import ApiResponse, success_response
from src.re_fine.calculator import escalation_schedule
from src.re_fine.schemas import EscalationScheduleResponse, ScheduleRowOut

router = APIRouter(prefix="/fines", tags=["fines"])


@router.get("/schedule")
async def get_schedule(
    request: Request,
    days: int = Query(5, ge=1, le=30, description="Cycle days to list, starting at the due date"),
) -> ApiResponse:
    rows = [ScheduleRowOut.from_row(r) for r in escalation_schedule(days)]
    return success_response(EscalationScheduleResponse(rows=rows).model_dump(), request)
