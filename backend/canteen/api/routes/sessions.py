"""Meal session routes."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from canteen.core.clock import local_now
from canteen.core.rate_limit import limiter
from canteen.core.rbac import CurrentUser, RequireAdmin
from canteen.core.sanitize import sanitize_text
from canteen.db.record_store import RecordStore
from canteen.db.session import DbSession
from canteen.models.menu import MealSession
from canteen.schemas.sessions import (
    MealSessionCreate,
    MealSessionResponse,
    MealSessionUpdate,
    OrderingWindowResponse,
)
from canteen.services.ordering_window import window_snapshot

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_session(db: DbSession, session_id: int) -> MealSession:
    session = RecordStore(db).get(MealSession, session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Meal session not found")
    return session


@router.get("/", response_model=list[MealSessionResponse])
@limiter.limit("60/minute")
def list_sessions(request: Request, db: DbSession, current_user: CurrentUser):
    return RecordStore(db).find(MealSession, order_by=MealSession.start_time)


@router.get("/{session_id}", response_model=MealSessionResponse)
@limiter.limit("60/minute")
def get_session(request: Request, db: DbSession, current_user: CurrentUser, session_id: int):
    return _get_session(db, session_id)


@router.get("/{session_id}/window", response_model=OrderingWindowResponse)
@limiter.limit("60/minute")
def get_ordering_window(request: Request, db: DbSession, current_user: CurrentUser, session_id: int):
    """Whether the session is taking orders right now, and for how long."""
    session = _get_session(db, session_id)
    return window_snapshot(session, local_now())


@router.post("/", response_model=MealSessionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_session(request: Request, db: DbSession, current_user: RequireAdmin, body: MealSessionCreate):
    values = body.model_dump()
    values["description"] = sanitize_text(values["description"])
    session = RecordStore(db).insert(MealSession, values)
    logger.info(f"Meal session {session.id} '{session.name}' created by user {current_user.user_id}")
    return session


@router.put("/{session_id}", response_model=MealSessionResponse)
@limiter.limit("30/minute")
def update_session(
    request: Request, db: DbSession, current_user: RequireAdmin,
    session_id: int, body: MealSessionUpdate,
):
    _get_session(db, session_id)
    patch = body.model_dump(exclude_unset=True)
    if "description" in patch:
        patch["description"] = sanitize_text(patch["description"]) or ""
    return RecordStore(db).update(MealSession, session_id, patch)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_session(request: Request, db: DbSession, current_user: RequireAdmin, session_id: int):
    _get_session(db, session_id)
    RecordStore(db).delete(MealSession, session_id)
    logger.info(f"Meal session {session_id} deleted by user {current_user.user_id}")
