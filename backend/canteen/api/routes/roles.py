"""Role management routes (admin)."""

from fastapi import APIRouter, HTTPException, Query, Request

from canteen.core.exceptions import SelfDemotionForbidden
from canteen.core.rate_limit import limiter
from canteen.core.rbac import RequireAdmin
from canteen.db.record_store import RecordStore
from canteen.db.session import DbSession
from canteen.models.user import User
from canteen.schemas.auth import UserResponse
from canteen.schemas.roles import RoleAuditResponse
from canteen.services.role_service import RoleService

router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
@limiter.limit("60/minute")
def list_users(request: Request, db: DbSession, current_user: RequireAdmin):
    return RecordStore(db).find(User, order_by=User.full_name)


@router.post("/users/{user_id}/toggle", response_model=RoleAuditResponse)
@limiter.limit("30/minute")
def toggle_user_role(request: Request, db: DbSession, current_user: RequireAdmin, user_id: int):
    """Promote an employee to admin, or demote an admin to employee."""
    try:
        return RoleService(db).toggle_role(user_id, current_user)
    except SelfDemotionForbidden as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/audit", response_model=list[RoleAuditResponse])
@limiter.limit("60/minute")
def list_role_audit(
    request: Request, db: DbSession, current_user: RequireAdmin,
    limit: int = Query(100, ge=1, le=500),
):
    return RoleService(db).audit_log(limit=limit)
