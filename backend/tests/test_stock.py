"""Tests for ingredient stock, adjustments, consumption and the consumption report."""

from datetime import date
from decimal import Decimal

import pytest

from canteen.core.exceptions import InsufficientStockError
from canteen.models.stock import AdjustmentType, ConsumptionLog, Ingredient, StockHistory
from canteen.services.consumption_report import consumption_report
from canteen.services.stock_service import StockService


@pytest.fixture
def rice(db_session):
    ingredient = Ingredient(
        name="Basmati Rice", unit="kg", cost_per_unit=Decimal("90"),
        current_stock=Decimal("20"), low_stock_threshold=Decimal("5"),
    )
    db_session.add(ingredient)
    db_session.commit()
    db_session.refresh(ingredient)
    return ingredient


@pytest.fixture
def oil(db_session):
    ingredient = Ingredient(
        name="Sunflower Oil", unit="l", cost_per_unit=Decimal("150"),
        current_stock=Decimal("3"), low_stock_threshold=Decimal("4"),
    )
    db_session.add(ingredient)
    db_session.commit()
    db_session.refresh(ingredient)
    return ingredient


# ============== Service ==============

class TestStockService:
    def test_add_sets_restock_time_and_ledger(self, db_session, rice, admin_actor):
        adjustment = StockService(db_session).adjust(
            rice.id, AdjustmentType.ADD, Decimal("10"), admin_actor, reason="Weekly delivery",
        )
        db_session.refresh(rice)
        assert adjustment.previous_stock == Decimal("20")
        assert adjustment.new_stock == Decimal("30")
        assert rice.current_stock == Decimal("30")
        assert rice.last_restocked_at is not None
        history = db_session.query(StockHistory).filter_by(ingredient_id=rice.id).all()
        assert [(h.change_type, h.change_amount) for h in history] == [("adjustment", Decimal("10"))]

    def test_subtract(self, db_session, rice, admin_actor):
        StockService(db_session).adjust(rice.id, "subtract", Decimal("15"), admin_actor)
        db_session.refresh(rice)
        assert rice.current_stock == Decimal("5")
        assert rice.is_low

    def test_cannot_go_negative(self, db_session, rice, admin_actor):
        with pytest.raises(InsufficientStockError):
            StockService(db_session).adjust(rice.id, AdjustmentType.SUBTRACT, Decimal("21"), admin_actor)
        db_session.refresh(rice)
        assert rice.current_stock == Decimal("20")
        assert db_session.query(StockHistory).count() == 0

    def test_stock_levels(self, db_session, rice, oil):
        levels = StockService(db_session).stock_levels()
        assert [i.name for i in levels["low"]] == ["Sunflower Oil"]
        assert [i.name for i in levels["ok"]] == ["Basmati Rice"]

    def test_consumption_draws_stock(self, db_session, rice, admin_actor):
        log = StockService(db_session).log_consumption(
            rice.id, Decimal("4"), admin_actor, consumption_date=date(2026, 3, 10),
        )
        db_session.refresh(rice)
        assert log.quantity_used == Decimal("4")
        assert rice.current_stock == Decimal("16")

    def test_duplicate_ingredient_name(self, db_session, rice):
        with pytest.raises(ValueError):
            StockService(db_session).create_ingredient({"name": "Basmati Rice", "unit": "kg"})


class TestConsumptionReport:
    def test_totals_per_ingredient_by_cost(self, db_session, rice, oil):
        db_session.add_all([
            ConsumptionLog(ingredient_id=rice.id, quantity_used=Decimal("2"), consumption_date=date(2026, 3, 1)),
            ConsumptionLog(ingredient_id=rice.id, quantity_used=Decimal("3"), consumption_date=date(2026, 3, 31)),
            ConsumptionLog(ingredient_id=oil.id, quantity_used=Decimal("1"), consumption_date=date(2026, 3, 15)),
            ConsumptionLog(ingredient_id=rice.id, quantity_used=Decimal("50"), consumption_date=date(2026, 4, 1)),
        ])
        db_session.commit()

        report = consumption_report(db_session, date(2026, 3, 20))

        assert report["month"] == date(2026, 3, 1)
        assert [(r["name"], r["total_quantity"], r["total_cost"]) for r in report["items"]] == [
            ("Basmati Rice", Decimal("5"), Decimal("450")),
            ("Sunflower Oil", Decimal("1"), Decimal("150")),
        ]
        assert report["total_cost"] == Decimal("600")

    def test_deleted_ingredient_grouped_as_unknown(self, db_session, rice):
        db_session.add(ConsumptionLog(ingredient_id=None, quantity_used=Decimal("7"), consumption_date=date(2026, 3, 2)))
        db_session.commit()

        report = consumption_report(db_session, date(2026, 3, 1))
        assert report["items"] == [{
            "ingredient_id": None,
            "name": "Unknown",
            "unit": "",
            "total_quantity": Decimal("7"),
            "total_cost": Decimal("0"),
        }]


# ============== Endpoints ==============

class TestStockEndpoints:
    def test_ingredient_lifecycle(self, client, admin_headers):
        created = client.post("/api/v1/stock/ingredients", headers=admin_headers, json={
            "name": "Toor Dal", "unit": "kg", "cost_per_unit": "110", "current_stock": "8",
            "low_stock_threshold": "10",
        })
        assert created.status_code == 201
        assert created.json()["is_low"] is True
        ingredient_id = created.json()["id"]

        duplicate = client.post("/api/v1/stock/ingredients", headers=admin_headers, json={
            "name": "Toor Dal", "unit": "kg",
        })
        assert duplicate.status_code == 400

        adjusted = client.post(f"/api/v1/stock/ingredients/{ingredient_id}/adjust", headers=admin_headers, json={
            "adjustment_type": "add", "quantity": "5", "reason": "Top up",
        })
        assert adjusted.status_code == 201
        assert Decimal(str(adjusted.json()["new_stock"])) == Decimal("13")

        levels = client.get("/api/v1/stock/levels", headers=admin_headers).json()
        assert [i["name"] for i in levels["ok"]] == ["Toor Dal"]

        history = client.get(f"/api/v1/stock/ingredients/{ingredient_id}/history", headers=admin_headers)
        assert len(history.json()) == 1

        assert client.delete(f"/api/v1/stock/ingredients/{ingredient_id}", headers=admin_headers).status_code == 204

    def test_over_subtraction_rejected(self, client, admin_headers, oil):
        response = client.post(f"/api/v1/stock/ingredients/{oil.id}/adjust", headers=admin_headers, json={
            "adjustment_type": "subtract", "quantity": "10",
        })
        assert response.status_code == 400
        assert "Only 3" in response.json()["detail"]

    def test_zero_quantity_rejected(self, client, admin_headers, oil):
        response = client.post(f"/api/v1/stock/ingredients/{oil.id}/adjust", headers=admin_headers, json={
            "adjustment_type": "add", "quantity": "0",
        })
        assert response.status_code == 422

    def test_unknown_ingredient(self, client, admin_headers):
        response = client.post("/api/v1/stock/ingredients/999/adjust", headers=admin_headers, json={
            "adjustment_type": "add", "quantity": "1",
        })
        assert response.status_code == 404

    def test_consumption_and_report(self, client, admin_headers, rice):
        logged = client.post("/api/v1/stock/consumption", headers=admin_headers, json={
            "ingredient_id": rice.id, "quantity_used": "2.5", "consumption_date": "2026-03-10",
        })
        assert logged.status_code == 201

        report = client.get("/api/v1/reports/consumption?month=2026-03-01", headers=admin_headers)
        assert report.status_code == 200
        row = report.json()["items"][0]
        assert row["name"] == "Basmati Rice"
        assert Decimal(str(row["total_cost"])) == Decimal("225")

    def test_employee_forbidden(self, client, employee_headers):
        assert client.get("/api/v1/reports/consumption", headers=employee_headers).status_code == 403
