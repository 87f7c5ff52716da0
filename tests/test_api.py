from decimal import Decimal

import pytest


def money(value):
    return Decimal(str(value))


@pytest.fixture
def room_id(client):
    response = client.post("/api/rooms", json={"name": "Room 1", "console_type": "PS5"})
    assert response.status_code == 200
    return response.json()["id"]


@pytest.fixture
def coffee_id(client):
    response = client.post("/api/cafe-products", json={"name": "Coffee", "category": "drinks", "price": "15", "stock": 20})
    assert response.status_code == 200
    return response.json()["id"]


class TestApp:
    def test_root_and_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
        assert client.get("/").json()["currency"] == "EGP"


class TestRooms:
    def test_create_uses_console_pricing(self, client, room_id):
        data = client.get(f"/api/rooms/{room_id}").json()
        assert money(data["pricing_single"]) == Decimal("25")
        assert money(data["pricing_multiplayer"]) == Decimal("35")
        assert data["status"] == "available"

    def test_duplicate_name_is_a_conflict(self, client, room_id):
        response = client.post("/api/rooms", json={"name": "Room 1", "console_type": "PS5"})
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "conflict"
        assert body["safe_to_retry"] is False

    def test_unknown_room(self, client):
        response = client.get("/api/rooms/404")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestSessionFlow:
    def test_fixed_session_pause_and_pay(self, client, room_id):
        started = client.post(f"/api/rooms/{room_id}/start-session",
                              json={"customer_name": "Omar", "mode": "single", "duration_hours": "1"})
        assert started.status_code == 200
        order_id = started.json()["order"]["id"]
        assert money(started.json()["order"]["total_amount"]) == Decimal("25")
        assert started.json()["room"]["status"] == "occupied"

        again = client.post(f"/api/rooms/{room_id}/start-session", json={"customer_name": "Sara", "mode": "single"})
        assert again.status_code == 409

        live = client.get(f"/api/rooms/{room_id}/live-cost")
        assert live.status_code == 200
        assert live.json()["is_open_time"] is False

        adjusted = client.post(f"/api/rooms/{room_id}/adjust-time", json={"delta_hours": "0.5"})
        assert money(adjusted.json()["order"]["total_amount"]) == Decimal("37.5")

        stopped = client.post(f"/api/rooms/{room_id}/stop-session", json={})
        assert stopped.json()["order"]["status"] == "paused"
        assert stopped.json()["transaction"] is None
        assert client.get(f"/api/rooms/{room_id}").json()["status"] == "available"

        paid = client.post(f"/api/orders/{order_id}/complete-payment", json={"payment_method": "card"})
        assert paid.status_code == 200
        assert money(paid.json()["transaction"]["amount"]) == Decimal("37.5")

        detail = client.get(f"/api/orders/{order_id}").json()
        assert detail["status"] == "completed"
        assert len(detail["items"]) == 2
        assert len(detail["transactions"]) == 1

        report = client.get("/api/reports/summary", params={"period": "daily"}).json()
        assert money(report["total_revenue"]) == Decimal("37.5")
        assert money(report["revenue_by_payment_method"]["card"]) == Decimal("37.5")
        assert report["currency"] == "EGP"

    def test_validation_errors_are_422(self, client, room_id):
        response = client.post(f"/api/rooms/{room_id}/start-session",
                               json={"customer_name": "Omar", "mode": "single", "duration_hours": "20"})
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
        assert response.json()["safe_to_retry"] is True

    def test_stop_idle_room(self, client, room_id):
        response = client.post(f"/api/rooms/{room_id}/stop-session", json={})
        assert response.status_code == 409

    def test_expired_list(self, client, room_id):
        assert client.get("/api/rooms/expired").json() == {"rooms": [], "count": 0}


class TestCafe:
    def test_counter_sale(self, client, coffee_id):
        response = client.post("/api/orders/cafe",
                               json={"customer_name": "Mona", "items": {str(coffee_id): 2}, "payment_method": "cash"})
        assert response.status_code == 200
        body = response.json()
        assert body["order"]["status"] == "completed"
        assert money(body["transaction"]["amount"]) == Decimal("30")

        transactions = client.get("/api/transactions").json()
        assert len(transactions) == 1
        assert transactions[0]["payment_method"] == "cash"

    def test_unknown_product(self, client, coffee_id):
        response = client.post("/api/orders/cafe", json={"customer_name": "Mona", "items": {"999": 1}})
        assert response.status_code == 422

    def test_stock_adjustment(self, client, coffee_id):
        response = client.put(f"/api/cafe-products/{coffee_id}/stock", json={"adjustment": -5})
        assert response.json()["stock"] == 15
        response = client.put(f"/api/cafe-products/{coffee_id}/stock", json={"adjustment": -50})
        assert response.status_code == 422


class TestAppointments:
    def test_booking_conflicts(self, client, room_id):
        booking = {"room_id": room_id, "customer_name": "Omar", "appointment_date": "2030-01-01",
                   "appointment_time": "09:00", "duration_hours": "1"}
        assert client.post("/api/appointments", json=booking).status_code == 200

        clash = dict(booking, customer_name="Sara", appointment_time="09:30")
        assert client.post("/api/appointments", json=clash).status_code == 409

        check = client.post("/api/appointments/check-conflict", json={
            "room_id": room_id, "appointment_date": "2030-01-01", "appointment_time": "10:00", "duration_hours": "1",
        })
        assert check.json() == {"has_conflict": False, "conflicting_ids": []}

        listed = client.get("/api/appointments", params={"appointment_date": "2030-01-01"}).json()
        assert [a["customer_name"] for a in listed] == ["Omar"]


class TestOperationLogs:
    def test_mutating_requests_are_logged(self, client, room_id):
        client.post(f"/api/rooms/{room_id}/start-session", json={"customer_name": "Omar", "mode": "single"})

        logs = client.get("/api/operation-logs").json()

        actions = [log["action"] for log in logs]
        assert "start session" in actions
        assert all(log["module"] == "rooms" for log in logs)
