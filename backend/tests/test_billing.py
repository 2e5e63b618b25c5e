"""Tests for monthly billing statements."""

from datetime import date
from decimal import Decimal

import pytest

from canteen.core.exceptions import RecordNotFound
from canteen.models.billing import EmployeeDeduction
from canteen.services.billing_service import BillingService, next_month


@pytest.fixture
def deductions(db_session, employee_user, other_employee):
    rows = [
        EmployeeDeduction(
            user_id=employee_user.id, source_kind="regular", source_order_id=1,
            amount=Decimal("120.00"), deduction_date=date(2026, 3, 2),
            deduction_month=date(2026, 3, 1), description="Regular Order - ORD-20260302-00001",
        ),
        EmployeeDeduction(
            user_id=employee_user.id, source_kind="beverage", source_order_id=4,
            amount=Decimal("30.00"), deduction_date=date(2026, 3, 31),
            deduction_month=date(2026, 3, 1), description="Beverage - #4",
        ),
        EmployeeDeduction(
            user_id=employee_user.id, source_kind="regular", source_order_id=9,
            amount=Decimal("80.00"), deduction_date=date(2026, 4, 1),
            deduction_month=date(2026, 3, 1), description="Regular Order - ORD-20260331-00003",
        ),
        EmployeeDeduction(
            user_id=other_employee.id, source_kind="regular", source_order_id=2,
            amount=Decimal("999.00"), deduction_date=date(2026, 3, 5),
            deduction_month=date(2026, 3, 1), description="Regular Order - ORD-20260305-00001",
        ),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


class TestNextMonth:
    def test_mid_year(self):
        assert next_month(date(2026, 3, 17)) == date(2026, 4, 1)

    def test_december_rolls_over(self):
        assert next_month(date(2026, 12, 31)) == date(2027, 1, 1)


class TestBillingService:
    def test_statement_covers_calendar_month(self, db_session, employee_user, deductions):
        statement = BillingService(db_session).statement(employee_user.id, date(2026, 3, 15))
        assert statement.month == date(2026, 3, 1)
        assert [d.source_order_id for d in statement.deductions] == [1, 4]
        assert statement.total == Decimal("150.00")

    def test_empty_month(self, db_session, employee_user, deductions):
        statement = BillingService(db_session).statement(employee_user.id, date(2026, 2, 1))
        assert statement.deductions == []
        assert statement.total == Decimal("0")

    def test_unknown_user(self, db_session):
        with pytest.raises(RecordNotFound):
            BillingService(db_session).statement(404, date(2026, 3, 1))

    def test_pdf_renders(self, db_session, employee_user, deductions):
        service = BillingService(db_session)
        content = service.statement_pdf(service.statement(employee_user.id, date(2026, 3, 1)))
        assert content.startswith(b"%PDF")


class TestBillingEndpoints:
    def test_own_statement(self, client, employee_headers, deductions):
        response = client.get("/api/v1/billing/statement?month=2026-03-01", headers=employee_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["employee_id"] == "EMP100"
        assert Decimal(str(body["total"])) == Decimal("150.00")
        assert len(body["deductions"]) == 2

    def test_employee_cannot_view_others(self, client, employee_headers, other_employee, deductions):
        response = client.get(
            f"/api/v1/billing/statement?month=2026-03-01&user_id={other_employee.id}",
            headers=employee_headers,
        )
        assert response.status_code == 403

    def test_admin_views_any_employee(self, client, admin_headers, other_employee, deductions):
        response = client.get(
            f"/api/v1/billing/statement?month=2026-03-01&user_id={other_employee.id}",
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert Decimal(str(response.json()["total"])) == Decimal("999.00")

    def test_admin_unknown_user(self, client, admin_headers):
        response = client.get("/api/v1/billing/statement?month=2026-03-01&user_id=9999", headers=admin_headers)
        assert response.status_code == 404

    def test_pdf_download(self, client, employee_headers, deductions):
        response = client.get("/api/v1/billing/statement/pdf?month=2026-03-20", headers=employee_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "billing_statement_2026-03.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")
