"""Tests for order status changes and salary deductions."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from canteen.core.exceptions import (
    DeductionWriteFailure,
    InvalidStatusTransition,
    RecordNotFound,
    StatusChangeConflict,
    StoreUnavailable,
)
from canteen.models.billing import EmployeeDeduction
from canteen.models.orders import (
    BeverageOrder,
    EstateRequest,
    GeneralOrder,
    HomeMealOrder,
    MassageBooking,
    MassageService,
    OrderKind,
    PartyOrder,
    RegularOrder,
)
from canteen.services.order_lifecycle import OrderLifecycleService, triggers_deduction

TODAY = date(2026, 3, 10)


def _regular_order(db_session, user, amount="150.00", status="pending", number="ORD-20260310-00001"):
    order = RegularOrder(
        order_number=number,
        user_id=user.id,
        status=status,
        total_amount=Decimal(amount),
        order_date=TODAY,
    )
    db_session.add(order)
    db_session.commit()
    db_session.refresh(order)
    return order


def _deductions(db_session):
    return db_session.query(EmployeeDeduction).all()


class TestTriggersDeduction:
    def test_only_transition_into_completed(self):
        assert triggers_deduction(RegularOrder, "ready", "completed")
        assert not triggers_deduction(RegularOrder, "completed", "completed")
        assert not triggers_deduction(RegularOrder, "pending", "ready")

    def test_non_deductible_kinds(self):
        for model in (GeneralOrder, PartyOrder, EstateRequest):
            assert not triggers_deduction(model, "pending", "completed")

    def test_deductible_kinds(self):
        for model in (RegularOrder, MassageBooking, BeverageOrder, HomeMealOrder):
            assert model.deductible


class TestApplyStatusChange:
    def test_completion_records_one_deduction(self, db_session, employee_user, admin_actor):
        order = _regular_order(db_session, employee_user)

        change = OrderLifecycleService(db_session).apply_status_change(
            OrderKind.REGULAR, order.id, "completed", admin_actor, today=TODAY,
        )

        assert change.previous_status == "pending"
        assert change.order.status == "completed"
        rows = _deductions(db_session)
        assert len(rows) == 1
        deduction = rows[0]
        assert deduction is change.deduction
        assert deduction.user_id == employee_user.id
        assert deduction.amount == Decimal("150.00")
        assert deduction.source_kind == "regular"
        assert deduction.source_order_id == order.id
        assert deduction.deduction_date == TODAY
        assert deduction.deduction_month == deduction.deduction_month.replace(day=1)
        assert deduction.description == "Regular Order - ORD-20260310-00001"

    def test_recompleting_does_not_deduct_again(self, db_session, employee_user, admin_actor):
        order = _regular_order(db_session, employee_user)
        service = OrderLifecycleService(db_session)

        service.apply_status_change(OrderKind.REGULAR, order.id, "completed", admin_actor, today=TODAY)
        again = service.apply_status_change(OrderKind.REGULAR, order.id, "completed", admin_actor, today=TODAY)

        assert again.previous_status == "completed"
        assert again.deduction is None
        assert len(_deductions(db_session)) == 1

    def test_completing_again_after_reopening_keeps_one_deduction(self, db_session, employee_user, admin_actor):
        order = _regular_order(db_session, employee_user)
        service = OrderLifecycleService(db_session)

        first = service.apply_status_change(OrderKind.REGULAR, order.id, "completed", admin_actor, today=TODAY)
        service.apply_status_change(OrderKind.REGULAR, order.id, "ready", admin_actor, today=TODAY)
        again = service.apply_status_change(OrderKind.REGULAR, order.id, "completed", admin_actor, today=TODAY)

        assert again.previous_status == "ready"
        assert again.order.status == "completed"
        assert again.deduction is None
        rows = _deductions(db_session)
        assert [r.id for r in rows] == [first.deduction.id]

    def test_intermediate_statuses_do_not_deduct(self, db_session, employee_user, admin_actor):
        order = _regular_order(db_session, employee_user)
        service = OrderLifecycleService(db_session)
        for new_status in ("preparing", "ready", "cancelled"):
            change = service.apply_status_change(OrderKind.REGULAR, order.id, new_status, admin_actor)
            assert change.deduction is None
        assert _deductions(db_session) == []

    def test_general_order_completion_not_deducted(self, db_session, employee_user, admin_actor):
        order = GeneralOrder(
            order_number="ORD-20260310-00002", user_id=employee_user.id, status="pending",
            total_amount=Decimal("300"), order_date=TODAY, charge_account="HR-OPS",
        )
        db_session.add(order)
        db_session.commit()

        change = OrderLifecycleService(db_session).apply_status_change(
            OrderKind.GENERAL, order.id, "completed", admin_actor,
        )

        assert change.order.status == "completed"
        assert _deductions(db_session) == []

    def test_party_completion_not_deducted(self, db_session, employee_user, admin_actor):
        order = PartyOrder(
            user_id=employee_user.id, department="Finance", party_date=TODAY + timedelta(days=5),
            order_date=TODAY, estimated_headcount=20, status="approved", total_cost=Decimal("5000"),
        )
        db_session.add(order)
        db_session.commit()

        OrderLifecycleService(db_session).apply_status_change(
            OrderKind.PARTY, order.id, "completed", admin_actor,
        )
        assert _deductions(db_session) == []

    def test_estate_request_has_no_completed_status(self, db_session, employee_user, admin_actor):
        request = EstateRequest(
            user_id=employee_user.id, item_name="LED Bulb", quantity=2, room_flat="B-204",
            request_date=TODAY, status="requested",
        )
        db_session.add(request)
        db_session.commit()

        with pytest.raises(InvalidStatusTransition):
            OrderLifecycleService(db_session).apply_status_change(
                OrderKind.ESTATE, request.id, "completed", admin_actor,
            )
        change = OrderLifecycleService(db_session).apply_status_change(
            OrderKind.ESTATE, request.id, "issued", admin_actor,
        )
        assert change.order.status == "issued"
        assert _deductions(db_session) == []

    def test_massage_completion_deducts_booking_price(self, db_session, employee_user, admin_actor):
        service = MassageService(name="Head Massage", duration_minutes=20, price=Decimal("250"))
        db_session.add(service)
        db_session.flush()
        booking = MassageBooking(
            user_id=employee_user.id, service_id=service.id, booking_date=TODAY,
            booking_time="16:00", price=Decimal("250"), status="confirmed",
        )
        db_session.add(booking)
        db_session.commit()

        change = OrderLifecycleService(db_session).apply_status_change(
            OrderKind.MASSAGE, booking.id, "completed", admin_actor, today=TODAY,
        )
        assert change.deduction.amount == Decimal("250")
        assert change.deduction.description == f"Massage - #{booking.id}"

    @pytest.mark.parametrize("kind,order_factory,label", [
        (
            OrderKind.BEVERAGE,
            lambda user: BeverageOrder(
                user_id=user.id, item_name="Masala Chai", quantity=3,
                total_amount=Decimal("45.00"), order_date=TODAY, status="ready",
            ),
            "Beverage",
        ),
        (
            OrderKind.HOME_MEAL,
            lambda user: HomeMealOrder(
                user_id=user.id, total_amount=Decimal("45.00"), delivery_charge=Decimal("50"),
                building="Tower C", flat_no="1102", order_date=TODAY, status="delivered",
            ),
            "Home Meal",
        ),
    ])
    def test_completion_deducts_total_amount(self, db_session, employee_user, admin_actor, kind, order_factory, label):
        order = order_factory(employee_user)
        db_session.add(order)
        db_session.commit()

        change = OrderLifecycleService(db_session).apply_status_change(
            kind, order.id, "completed", admin_actor, today=TODAY,
        )

        assert change.deduction.amount == Decimal("45.00")
        assert change.deduction.source_kind == kind.value
        assert change.deduction.description == f"{label} - #{order.id}"
        assert len(_deductions(db_session)) == 1

    def test_invalid_status_leaves_order_unchanged(self, db_session, employee_user, admin_actor):
        order = _regular_order(db_session, employee_user)

        with pytest.raises(InvalidStatusTransition) as exc:
            OrderLifecycleService(db_session).apply_status_change(
                OrderKind.REGULAR, order.id, "shipped", admin_actor,
            )

        assert "completed" in exc.value.allowed
        db_session.refresh(order)
        assert order.status == "pending"
        assert _deductions(db_session) == []

    def test_missing_order(self, db_session, admin_actor):
        with pytest.raises(RecordNotFound):
            OrderLifecycleService(db_session).apply_status_change(
                OrderKind.REGULAR, 12345, "ready", admin_actor,
            )

    def test_kind_mismatch_is_not_found(self, db_session, employee_user, admin_actor):
        order = _regular_order(db_session, employee_user)
        with pytest.raises(RecordNotFound):
            OrderLifecycleService(db_session).apply_status_change(
                OrderKind.GENERAL, order.id, "ready", admin_actor,
            )


class TestDeductionFailure:
    def test_status_kept_when_deduction_write_fails(self, db_session, employee_user, admin_actor, monkeypatch):
        order = _regular_order(db_session, employee_user)
        service = OrderLifecycleService(db_session)

        def failing_insert(model, values):
            raise StoreUnavailable("Could not insert into employee_deductions")

        monkeypatch.setattr(service.store, "insert", failing_insert)

        with pytest.raises(DeductionWriteFailure) as exc:
            service.apply_status_change(OrderKind.REGULAR, order.id, "completed", admin_actor, today=TODAY)

        assert exc.value.amount == Decimal("150.00")
        assert exc.value.previous_status == "pending"
        assert exc.value.order.status == "completed"
        db_session.refresh(order)
        assert order.status == "completed"
        assert _deductions(db_session) == []


class TestConcurrentStatusChanges:
    def test_retries_after_lost_compare_and_swap(self, db_session, employee_user, admin_actor, monkeypatch):
        order = _regular_order(db_session, employee_user, status="ready")
        service = OrderLifecycleService(db_session, max_attempts=3)
        real_update_if = service.store.update_if
        calls = []

        def racing_update_if(model, record_id, expected, patch):
            calls.append(expected["status"])
            if len(calls) == 1:
                # Another admin completes the order between our read and write
                real_update_if(model, record_id, expected={"status": "ready"}, patch={"status": "completed"})
                return None
            return real_update_if(model, record_id, expected, patch)

        monkeypatch.setattr(service.store, "update_if", racing_update_if)

        change = service.apply_status_change(OrderKind.REGULAR, order.id, "completed", admin_actor, today=TODAY)

        assert calls == ["ready", "completed"]
        assert change.previous_status == "completed"
        # The other writer's completion is not ours to deduct
        assert change.deduction is None

    def test_gives_up_after_max_attempts(self, db_session, employee_user, admin_actor, monkeypatch):
        order = _regular_order(db_session, employee_user)
        service = OrderLifecycleService(db_session, max_attempts=2)
        monkeypatch.setattr(service.store, "update_if", lambda *args, **kwargs: None)

        with pytest.raises(StatusChangeConflict) as exc:
            service.apply_status_change(OrderKind.REGULAR, order.id, "completed", admin_actor)

        assert exc.value.attempts == 2
        assert _deductions(db_session) == []
