"""Tests for meal sessions, menus and the weekly menu plan."""

from datetime import date

from canteen.models.menu import WeeklyMenu

LUNCH_DATE = date(2026, 3, 10)


class TestMealSessions:
    def test_admin_creates_session(self, client, admin_headers):
        response = client.post("/api/v1/sessions/", headers=admin_headers, json={
            "name": "Breakfast", "start_time": "07:30", "end_time": "10:00",
            "order_cutoff_minutes_before": 15,
        })
        assert response.status_code == 201
        assert response.json()["start_time"] == "07:30"

    def test_invalid_time_rejected(self, client, admin_headers):
        response = client.post("/api/v1/sessions/", headers=admin_headers, json={
            "name": "Broken", "start_time": "7am", "end_time": "10:00",
        })
        assert response.status_code == 422

    def test_negative_cutoff_rejected(self, client, admin_headers):
        response = client.post("/api/v1/sessions/", headers=admin_headers, json={
            "name": "Broken", "start_time": "07:00", "end_time": "10:00",
            "order_cutoff_minutes_before": -5,
        })
        assert response.status_code == 422

    def test_employee_cannot_create(self, client, employee_headers):
        response = client.post("/api/v1/sessions/", headers=employee_headers, json={
            "name": "Snack", "start_time": "16:00", "end_time": "17:00",
        })
        assert response.status_code == 403

    def test_update_and_delete(self, client, admin_headers, lunch_session):
        response = client.put(
            f"/api/v1/sessions/{lunch_session.id}", headers=admin_headers,
            json={"order_cutoff_minutes_before": 45},
        )
        assert response.status_code == 200
        assert response.json()["order_cutoff_minutes_before"] == 45

        assert client.delete(f"/api/v1/sessions/{lunch_session.id}", headers=admin_headers).status_code == 204
        assert client.get(f"/api/v1/sessions/{lunch_session.id}", headers=admin_headers).status_code == 404

    def test_ordering_window(self, client, employee_headers, lunch_session, freeze_lunch_time):
        response = client.get(f"/api/v1/sessions/{lunch_session.id}/window", headers=employee_headers)
        assert response.status_code == 200
        assert response.json() == {
            "session_id": lunch_session.id,
            "is_active": True,
            "minutes_remaining": 120,
            "label": "2h 0m remaining",
            "cutoff_time": "14:00",
            "spans_midnight": False,
        }


class TestMenu:
    def test_menu_item_crud(self, client, admin_headers, employee_headers):
        created = client.post("/api/v1/menu/items", headers=admin_headers, json={
            "name": "Paneer Wrap", "category": "Snacks", "price": "65.00",
        })
        assert created.status_code == 201
        item_id = created.json()["id"]

        updated = client.put(f"/api/v1/menu/items/{item_id}", headers=admin_headers, json={"available": False})
        assert updated.json()["available"] is False

        listed = client.get("/api/v1/menu/items?available_only=true", headers=employee_headers)
        assert item_id not in [i["id"] for i in listed.json()]

        assert client.delete(f"/api/v1/menu/items/{item_id}", headers=admin_headers).status_code == 204
        assert client.get(f"/api/v1/menu/items/{item_id}", headers=admin_headers).status_code == 404

    def test_negative_price_rejected(self, client, admin_headers):
        response = client.post("/api/v1/menu/items", headers=admin_headers, json={
            "name": "Free Lunch", "category": "Mains", "price": "-1",
        })
        assert response.status_code == 422

    def test_session_menu_today_hides_unavailable(
        self, client, employee_headers, lunch_session, menu_items, monkeypatch,
    ):
        monkeypatch.setattr("canteen.api.routes.menu.local_today", lambda: LUNCH_DATE)
        response = client.get(f"/api/v1/menu/sessions/{lunch_session.id}/today", headers=employee_headers)
        assert response.status_code == 200
        assert sorted(i["name"] for i in response.json()) == ["Chicken Biryani", "Veg Thali"]

    def test_daily_menu_duplicate_entry(self, client, admin_headers, lunch_session, menu_items):
        response = client.post("/api/v1/menu/daily", headers=admin_headers, json={
            "menu_date": LUNCH_DATE.isoformat(),
            "session_id": lunch_session.id,
            "menu_item_id": menu_items[0].id,
        })
        assert response.status_code == 400


class TestWeeklyMenu:
    def _add(self, client, headers, name, day, meal):
        return client.post("/api/v1/weekly-menu/", headers=headers, json={
            "item_name": name, "day_of_week": day, "meal_type": meal, "price": "50",
        })

    def test_listing_ordered_by_day_then_meal(self, client, admin_headers, employee_headers):
        self._add(client, admin_headers, "Rajma Rice", 1, "lunch")
        self._add(client, admin_headers, "Poha", 1, "breakfast")
        self._add(client, admin_headers, "Khichdi", 0, "dinner")
        self._add(client, admin_headers, "Samosa", 1, "snacks")

        response = client.get("/api/v1/weekly-menu/", headers=employee_headers)
        assert response.status_code == 200
        assert [e["item_name"] for e in response.json()] == ["Khichdi", "Poha", "Rajma Rice", "Samosa"]

        monday = client.get("/api/v1/weekly-menu/?day_of_week=1&meal_type=lunch", headers=employee_headers)
        assert [e["item_name"] for e in monday.json()] == ["Rajma Rice"]

    def test_invalid_day_and_meal_rejected(self, client, admin_headers):
        assert self._add(client, admin_headers, "Bad Day", 7, "lunch").status_code == 422
        assert self._add(client, admin_headers, "Bad Meal", 2, "brunch").status_code == 422

    def test_update_and_delete(self, client, admin_headers, db_session):
        entry_id = self._add(client, admin_headers, "Idli", 3, "breakfast").json()["id"]
        response = client.put(f"/api/v1/weekly-menu/{entry_id}", headers=admin_headers, json={"active": False})
        assert response.json()["active"] is False
        assert client.delete(f"/api/v1/weekly-menu/{entry_id}", headers=admin_headers).status_code == 204
        assert db_session.get(WeeklyMenu, entry_id) is None
