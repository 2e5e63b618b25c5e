"""Billing statement routes."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response

from canteen.core.clock import local_today
from canteen.core.rate_limit import limiter
from canteen.core.rbac import CurrentUser, TokenData
from canteen.db.session import DbSession
from canteen.schemas.billing import DeductionResponse, StatementResponse
from canteen.services.billing_service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter()


def _statement_user(current_user: TokenData, user_id: Optional[int]) -> int:
    """Employees see their own statement; admins may view anyone's."""
    if user_id is None or user_id == current_user.user_id:
        return current_user.user_id
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Cannot view another employee's statement")
    return user_id


@router.get("/statement", response_model=StatementResponse)
@limiter.limit("60/minute")
def get_statement(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    month: Optional[date] = None,
    user_id: Optional[int] = None,
):
    """Salary deductions dated within a month (any day of the month selects it)."""
    statement = BillingService(db).statement(
        _statement_user(current_user, user_id), month or local_today(),
    )
    return StatementResponse(
        user_id=statement.user.id,
        full_name=statement.user.full_name,
        employee_id=statement.user.employee_id,
        month=statement.month,
        deductions=[DeductionResponse.model_validate(d) for d in statement.deductions],
        total=statement.total,
    )


@router.get("/statement/pdf")
@limiter.limit("10/minute")
def download_statement_pdf(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    month: Optional[date] = None,
    user_id: Optional[int] = None,
):
    service = BillingService(db)
    statement = service.statement(_statement_user(current_user, user_id), month or local_today())
    content = service.statement_pdf(statement)
    filename = f"billing_statement_{statement.month:%Y-%m}.pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
