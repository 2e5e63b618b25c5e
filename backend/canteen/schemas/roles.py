"""Role management schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class RoleAuditResponse(BaseModel):
    id: int
    user_id: int
    previous_role: str
    new_role: str
    changed_by: int
    created_at: datetime

    model_config = {"from_attributes": True}
