"""Order status lifecycle service.

Applies an administrator's status change to any order kind and records the
matching salary deduction the first time a payroll-deductible order becomes
``completed``.

Flow:
1. Reject statuses outside the kind's allowed set (nothing is written).
2. Read the order and remember its current status.
3. Write the new status with a compare-and-swap on the status just read.
   If another writer got there first, re-read and re-evaluate.
4. If the order moved into ``completed`` from any other status and the kind
   is deductible, insert one ``EmployeeDeduction`` unless the order already
   has one from an earlier completion.

The status write and the deduction write are separate commits. When the
deduction insert fails the new status stays and ``DeductionWriteFailure``
is raised so the administrator can be told.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from canteen.core.clock import local_today, month_start, to_local
from canteen.core.config import settings
from canteen.core.exceptions import (
    DeductionWriteFailure,
    InvalidStatusTransition,
    RecordNotFound,
    StatusChangeConflict,
    StoreUnavailable,
)
from canteen.core.rbac import TokenData
from canteen.db.record_store import RecordStore
from canteen.models.billing import EmployeeDeduction
from canteen.models.orders import COMPLETED, OrderKind, OrderKindPolicy, order_model

logger = logging.getLogger(__name__)


@dataclass
class StatusChange:
    """Outcome of a successful status change."""

    order: OrderKindPolicy
    previous_status: str
    deduction: Optional[EmployeeDeduction] = None


def triggers_deduction(model, previous_status: str, new_status: str) -> bool:
    """True only for a transition into ``completed`` on a deductible kind."""
    return (
        model.deductible
        and previous_status != COMPLETED
        and new_status == COMPLETED
    )


class OrderLifecycleService:
    """Status changes and their payroll side effect."""

    def __init__(self, db: Session, max_attempts: Optional[int] = None):
        self.db = db
        self.store = RecordStore(db)
        self.max_attempts = max(1, max_attempts or settings.status_change_max_attempts)

    def apply_status_change(
        self,
        kind: OrderKind,
        order_id: int,
        new_status: str,
        actor: TokenData,
        today: Optional[date] = None,
    ) -> StatusChange:
        """Set ``new_status`` on an order of the given kind.

        Raises:
            InvalidStatusTransition: status not allowed for this kind.
            RecordNotFound: no such order.
            StatusChangeConflict: the order kept changing concurrently.
            DeductionWriteFailure: status saved, deduction not recorded.
            StoreUnavailable: the record store failed.
        """
        model = order_model(kind)
        if not model.accepts_status(new_status):
            raise InvalidStatusTransition(model.kind.value, new_status, model.allowed_statuses())

        for attempt in range(1, self.max_attempts + 1):
            current = self.store.get(model, order_id, refresh=True)
            if current is None:
                raise RecordNotFound(model.__tablename__, order_id)
            previous_status = current.status

            updated = self.store.update_if(
                model, order_id,
                expected={"status": previous_status},
                patch={"status": new_status},
            )
            if updated is None:
                logger.warning(
                    f"{model.kind.value} order {order_id} changed during status update "
                    f"(attempt {attempt}/{self.max_attempts}), re-reading"
                )
                continue

            logger.info(
                f"{model.kind.value} order {order_id}: {previous_status} -> {new_status} "
                f"by user {actor.user_id}"
            )
            change = StatusChange(order=updated, previous_status=previous_status)
            if triggers_deduction(model, previous_status, new_status):
                change.deduction = self._record_deduction(
                    updated, today or local_today(), previous_status
                )
            return change

        raise StatusChangeConflict(model.kind.value, order_id, self.max_attempts)

    def _record_deduction(
        self, order: OrderKindPolicy, today: date, previous_status: str
    ) -> Optional[EmployeeDeduction]:
        amount = order.amount
        if amount is None:
            logger.warning(f"{order.kind.value} order {order.id} has no amount, no deduction recorded")
            return None

        # Completed before, moved back, completed again: already deducted
        existing = self.store.find(
            EmployeeDeduction, source_kind=order.kind.value, source_order_id=order.id, limit=1,
        )
        if existing:
            logger.info(
                f"{order.kind.value} order {order.id} already has deduction {existing[0].id}, "
                f"not deducting again"
            )
            return None

        values = {
            "user_id": order.user_id,
            "source_kind": order.kind.value,
            "source_order_id": order.id,
            "amount": amount,
            "deduction_date": today,
            "deduction_month": month_start(to_local(order.created_at).date()),
            "description": f"{order.label} - {order.reference}",
        }
        try:
            deduction = self.store.insert(EmployeeDeduction, values)
        except StoreUnavailable as e:
            logger.error(
                f"Deduction of {amount} for {order.kind.value} order {order.id} "
                f"(user {order.user_id}) failed after status was saved: {e}"
            )
            raise DeductionWriteFailure(order, amount, e, previous_status) from e

        logger.info(
            f"Recorded deduction {deduction.id}: {amount} from user {order.user_id} "
            f"for {order.kind.value} order {order.id}"
        )
        return deduction
