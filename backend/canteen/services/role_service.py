"""Admin role management with an audit trail."""

import logging
from typing import List

from sqlalchemy.orm import Session

from canteen.core.exceptions import RecordNotFound, SelfDemotionForbidden
from canteen.core.rbac import TokenData, UserRole
from canteen.db.record_store import RecordStore
from canteen.models.audit import AdminRoleAudit
from canteen.models.user import User

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    def toggle_role(self, user_id: int, actor: TokenData) -> AdminRoleAudit:
        """Switch a user between admin and employee and audit the change."""
        user = self.store.get(User, user_id)
        if user is None:
            raise RecordNotFound(User.__tablename__, user_id)
        if user.id == actor.user_id and user.role == UserRole.ADMIN:
            raise SelfDemotionForbidden()

        previous = user.role
        new_role = UserRole.EMPLOYEE if previous == UserRole.ADMIN else UserRole.ADMIN
        user.role = new_role
        audit = AdminRoleAudit(
            user_id=user.id,
            previous_role=previous.value,
            new_role=new_role.value,
            changed_by=actor.user_id,
        )
        self.store.insert_many([audit])
        logger.info(f"User {user.id} role {previous.value} -> {new_role.value} by user {actor.user_id}")
        return audit

    def audit_log(self, limit: int = 100) -> List[AdminRoleAudit]:
        return self.store.find(
            AdminRoleAudit,
            order_by=[AdminRoleAudit.created_at.desc(), AdminRoleAudit.id.desc()],
            limit=limit,
        )
