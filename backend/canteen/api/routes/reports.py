"""Report routes."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Request

from canteen.core.clock import local_today
from canteen.core.rate_limit import limiter
from canteen.core.rbac import RequireAdmin
from canteen.db.session import DbSession
from canteen.schemas.stock import ConsumptionReportResponse
from canteen.services.consumption_report import consumption_report

router = APIRouter()


@router.get("/consumption", response_model=ConsumptionReportResponse)
@limiter.limit("30/minute")
def get_consumption_report(
    request: Request,
    db: DbSession,
    current_user: RequireAdmin,
    month: Optional[date] = None,
):
    """Ingredient usage and cost for the month containing ``month`` (default: this month)."""
    return consumption_report(db, month or local_today())
