from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import T0, snapshot
from gamezone.core.constants import ORDER_ITEMS, ROOMS, TRANSACTIONS
from gamezone.core.exceptions import ConflictError, NotFoundError, ValidationError
from gamezone.services.catalog import RoomCatalog
from gamezone.utils.money import line_total


def assert_room_cleared(room):
    assert room["status"] == "available"
    assert room["current_customer_name"] is None
    assert room["current_mode"] is None
    assert room["current_session_start"] is None
    assert room["current_session_end"] is None


class TestStartSession:
    def test_fixed_session_books_cost_up_front(self, engine, gateway, room):
        result = engine.start_session(room["id"], "Omar", "single", Decimal("2"))

        assert result.order["status"] == "active"
        assert result.order["order_type"] == "room_reservation"
        assert result.order["total_amount"] == Decimal("50")
        assert result.order["end_time"] == T0 + timedelta(hours=2)
        assert result.room["status"] == "occupied"
        assert result.room["current_customer_name"] == "Omar"
        assert result.room["current_session_end"] == T0 + timedelta(hours=2)
        assert result.items[0]["item_name"] == "Room 1 - Single - 2h"

    def test_open_time_adds_placeholder_line(self, engine, room):
        result = engine.start_session(room["id"], "Omar", "multiplayer")

        assert result.order["is_open_time"] is True
        assert result.order["end_time"] is None
        assert result.order["total_amount"] == Decimal("0")
        assert result.room["current_session_end"] is None
        assert result.items[0]["quantity"] == Decimal("0")
        assert result.items[0]["unit_price"] == Decimal("35")

    def test_occupied_room_is_rejected_without_writes(self, engine, gateway, room):
        engine.start_session(room["id"], "Omar", "single", Decimal("1"))
        before = snapshot(gateway)

        with pytest.raises(ConflictError):
            engine.start_session(room["id"], "Sara", "single", Decimal("1"))

        assert snapshot(gateway) == before

    def test_room_under_maintenance_is_rejected(self, engine, gateway, room):
        RoomCatalog(gateway).update(room["id"], {"status": "maintenance"})

        with pytest.raises(ConflictError):
            engine.start_session(room["id"], "Omar", "single")

    @pytest.mark.parametrize("duration", [Decimal("0"), Decimal("0.25"), Decimal("12.5"), Decimal("-1")])
    def test_duration_outside_limits(self, engine, room, duration):
        with pytest.raises(ValidationError):
            engine.start_session(room["id"], "Omar", "single", duration)

    def test_unknown_mode_and_blank_name(self, engine, room):
        with pytest.raises(ValidationError):
            engine.start_session(room["id"], "Omar", "coop")
        with pytest.raises(ValidationError):
            engine.start_session(room["id"], "   ", "single")

    def test_unknown_room(self, engine):
        with pytest.raises(NotFoundError):
            engine.start_session(99, "Omar", "single")

    def test_attach_room_to_cafe_tab(self, engine, composer, clock, room, coffee):
        tab = composer.create_cafe_order("Omar", {coffee["id"]: 1}, pay_now=False).order
        assert tab["status"] == "active"

        started = engine.start_session(room["id"], "Walk-in", "single", order_id=tab["id"])
        assert started.order["id"] == tab["id"]
        assert started.order["customer_name"] == "Omar"
        assert started.room["current_customer_name"] == "Omar"
        assert started.order["order_type"] == "combo"
        assert started.order["room_id"] == room["id"]

        clock.advance(hours=1)
        stopped = engine.stop_session(room["id"])
        assert stopped.room_cost == Decimal("25")
        assert stopped.cafe_cost == Decimal("15")
        assert stopped.order["total_amount"] == Decimal("40")
        assert stopped.transaction["amount"] == Decimal("40")


class TestStopSession:
    def test_open_time_with_cafe_items(self, engine, composer, gateway, clock, room, coffee):
        """Open time for 90 minutes plus two coffees"""
        order = engine.start_session(room["id"], "Omar", "single").order
        composer.add_cafe_items({coffee["id"]: 2}, order_id=order["id"])
        clock.advance(minutes=90)

        result = engine.stop_session(room["id"])

        assert result.room_cost == Decimal("37.50")
        assert result.cafe_cost == Decimal("30.00")
        assert result.order["total_amount"] == Decimal("67.50")
        assert result.order["status"] == "completed"
        assert result.order["end_time"] == T0 + timedelta(minutes=90)
        transactions = gateway.list(TRANSACTIONS, {"order_id": order["id"]})
        assert len(transactions) == 1
        assert transactions[0]["amount"] == Decimal("67.50")
        assert transactions[0]["transaction_type"] == "payment"
        assert_room_cleared(result.room)
        assert result.room["current_total_cost"] == Decimal("37.50")

        room_lines = [i for i in gateway.list(ORDER_ITEMS, {"order_id": order["id"]}) if i["item_type"] == "room_time"]
        assert len(room_lines) == 1
        assert room_lines[0]["quantity"] == Decimal("1.5")

    def test_open_time_line_is_priced_on_its_stored_hours(self, engine, gateway, clock, room):
        """54 seconds round to 0.0150h, which costs 0.38 at 25/h"""
        order = engine.start_session(room["id"], "Omar", "single").order
        clock.advance(milliseconds=53986)

        result = engine.stop_session(room["id"])

        line = gateway.list(ORDER_ITEMS, {"order_id": order["id"]})[0]
        assert line["quantity"] == Decimal("0.0150")
        assert line["total_price"] == line_total(line["quantity"], line["unit_price"]) == Decimal("0.38")
        assert result.order["total_amount"] == Decimal("0.38")
        assert result.transaction["amount"] == Decimal("0.38")

    def test_fixed_session_pauses_at_committed_price(self, engine, gateway, clock, room):
        """Stopping early keeps the adjusted price and leaves the order unpaid"""
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        assert order["total_amount"] == Decimal("25")

        adjusted = engine.adjust_time(room["id"], Decimal("0.5"))
        assert adjusted.room["current_session_end"] == T0 + timedelta(hours=1.5)
        assert adjusted.order["total_amount"] == Decimal("37.50")

        clock.advance(minutes=20)
        result = engine.stop_session(room["id"])

        assert result.order["status"] == "paused"
        assert result.order["total_amount"] == Decimal("37.50")
        assert result.transaction is None
        assert gateway.list(TRANSACTIONS) == []
        assert_room_cleared(result.room)

    def test_force_complete_pays_fixed_session(self, engine, gateway, room, coffee, composer):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        composer.add_cafe_items({coffee["id"]: 1}, order_id=order["id"])

        result = engine.stop_session(room["id"], force_complete=True, payment_method="card")

        assert result.order["status"] == "completed"
        assert result.transaction["amount"] == Decimal("40")
        assert result.transaction["payment_method"] == "card"

    def test_idle_room_cannot_be_stopped(self, engine, gateway, room):
        before = snapshot(gateway)
        with pytest.raises(ConflictError):
            engine.stop_session(room["id"])
        assert snapshot(gateway) == before

    def test_bad_payment_method(self, engine, room):
        engine.start_session(room["id"], "Omar", "single")
        with pytest.raises(ValidationError):
            engine.stop_session(room["id"], payment_method="voucher")


class TestReactivate:
    def test_paused_order_resumes_with_new_segment(self, engine, gateway, clock, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        clock.advance(minutes=30)
        engine.stop_session(room["id"])
        clock.advance(minutes=10)

        result = engine.reactivate_session(order["id"], Decimal("1"))

        assert result.order["status"] == "active"
        assert result.order["start_time"] == clock.now
        assert result.order["total_amount"] == Decimal("50")
        assert result.room["status"] == "occupied"
        assert result.room["current_customer_name"] == "Omar"
        assert "resumed" in result.items[0]["item_name"]

    def test_reactivate_on_open_time_bills_elapsed(self, engine, clock, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        engine.stop_session(room["id"])
        engine.reactivate_session(order["id"])
        clock.advance(minutes=30)

        result = engine.stop_session(room["id"])

        assert result.room_cost == Decimal("37.50")
        assert result.order["status"] == "completed"
        assert result.transaction["amount"] == Decimal("37.50")

    def test_room_taken_by_someone_else(self, engine, gateway, room):
        """Reactivation never steals a room that is in use"""
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        engine.stop_session(room["id"])
        engine.start_session(room["id"], "Sara", "single", Decimal("1"))
        before = snapshot(gateway)

        with pytest.raises(ConflictError):
            engine.reactivate_session(order["id"])

        assert snapshot(gateway) == before

    def test_only_paused_orders(self, engine, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        with pytest.raises(ConflictError):
            engine.reactivate_session(order["id"])


class TestAdjustTime:
    def test_shortening_credits_the_order(self, engine, room):
        engine.start_session(room["id"], "Omar", "single", Decimal("2"))
        result = engine.adjust_time(room["id"], Decimal("-0.5"))

        assert result.order["total_amount"] == Decimal("37.50")
        assert result.order["duration_hours"] == Decimal("1.5")
        assert result.items[0]["quantity"] == Decimal("-0.5")
        assert result.items[0]["total_price"] == Decimal("-12.50")

    def test_end_cannot_reach_start(self, engine, gateway, room):
        engine.start_session(room["id"], "Omar", "single", Decimal("1"))
        before = snapshot(gateway)

        with pytest.raises(ValidationError):
            engine.adjust_time(room["id"], Decimal("-1"))

        assert snapshot(gateway) == before

    def test_zero_delta(self, engine, room):
        engine.start_session(room["id"], "Omar", "single", Decimal("1"))
        with pytest.raises(ValidationError):
            engine.adjust_time(room["id"], Decimal("0"))

    def test_open_time_has_no_end(self, engine, room):
        engine.start_session(room["id"], "Omar", "single")
        with pytest.raises(ConflictError):
            engine.adjust_time(room["id"], Decimal("1"))


class TestExtendTime:
    def test_live_order_moves_room_end(self, engine, room):
        order = engine.start_session(room["id"], "Omar", "multiplayer", Decimal("1")).order
        result = engine.extend_time(order["id"], Decimal("1"))

        assert result.order["end_time"] == T0 + timedelta(hours=2)
        assert result.room["current_session_end"] == T0 + timedelta(hours=2)
        assert result.order["total_amount"] == Decimal("70")

    def test_paused_order_moves_alone(self, engine, gateway, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        engine.stop_session(room["id"])

        result = engine.extend_time(order["id"], Decimal("0.5"))

        assert result.order["status"] == "paused"
        assert result.order["total_amount"] == Decimal("37.50")
        assert_room_cleared(gateway.get(ROOMS, room["id"]))

    def test_completed_order_is_final(self, engine, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        engine.stop_session(room["id"], force_complete=True)
        with pytest.raises(ConflictError):
            engine.extend_time(order["id"], Decimal("1"))


class TestCompletePayment:
    def test_paused_order(self, engine, gateway, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        engine.adjust_time(room["id"], Decimal("0.5"))
        engine.stop_session(room["id"])

        result = engine.complete_payment(order["id"], "transfer")

        assert result.order["status"] == "completed"
        assert result.transaction["amount"] == Decimal("37.50")
        assert result.transaction["payment_method"] == "transfer"
        assert len(gateway.list(TRANSACTIONS)) == 1

    def test_live_fixed_session_releases_room(self, engine, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order

        result = engine.complete_payment(order["id"])

        assert_room_cleared(result.room)
        assert result.room["current_total_cost"] == Decimal("25")
        assert result.transaction["amount"] == Decimal("25")

    def test_live_open_time_must_be_stopped_first(self, engine, gateway, room):
        order = engine.start_session(room["id"], "Omar", "single").order
        before = snapshot(gateway)
        with pytest.raises(ConflictError):
            engine.complete_payment(order["id"])
        assert snapshot(gateway) == before

    def test_cafe_tab(self, engine, composer, coffee):
        tab = composer.create_cafe_order("Omar", {coffee["id"]: 3}, pay_now=False).order

        result = engine.complete_payment(tab["id"], "cash")

        assert result.order["status"] == "completed"
        assert result.transaction["amount"] == Decimal("45")

    def test_paying_twice(self, engine, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        engine.complete_payment(order["id"])
        with pytest.raises(ConflictError):
            engine.complete_payment(order["id"])


class TestCancelAndRefund:
    def test_cancel_live_session(self, engine, gateway, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order

        result = engine.cancel_order(order["id"])

        assert result.order["status"] == "cancelled"
        assert_room_cleared(result.room)
        assert gateway.list(TRANSACTIONS) == []

    def test_refund_up_to_paid_amount(self, engine, composer, gateway, coffee):
        order = composer.create_cafe_order("Omar", {coffee["id"]: 2}).order

        refund = engine.refund_order(order["id"], Decimal("10"), reason="Cold coffee")
        assert refund["transaction_type"] == "refund"
        assert refund["amount"] == Decimal("10")
        assert refund["description"] == "Cold coffee"

        with pytest.raises(ValidationError):
            engine.refund_order(order["id"], Decimal("25"))
        engine.refund_order(order["id"], Decimal("20"))
        assert len(gateway.list(TRANSACTIONS, {"transaction_type": "refund"})) == 2

    def test_refund_needs_completed_order(self, engine, room):
        order = engine.start_session(room["id"], "Omar", "single", Decimal("1")).order
        with pytest.raises(ConflictError):
            engine.refund_order(order["id"], Decimal("5"))


class TestMonitoring:
    def test_live_cost_of_open_time(self, engine, composer, clock, room, coffee):
        order = engine.start_session(room["id"], "Omar", "single").order
        composer.add_cafe_items({coffee["id"]: 1}, order_id=order["id"])
        clock.advance(minutes=30)

        cost = engine.live_cost(room["id"])

        assert cost.elapsed_hours == Decimal("0.5")
        assert cost.room_cost == Decimal("12.50")
        assert cost.cafe_cost == Decimal("15")
        assert cost.total == Decimal("27.50")
        assert cost.overdue is False

    def test_expired_fixed_sessions(self, engine, clock, room, other_room):
        engine.start_session(room["id"], "Omar", "single", Decimal("1"))
        engine.start_session(other_room["id"], "Sara", "single")
        clock.advance(minutes=59)
        assert engine.expired_sessions() == []

        clock.advance(minutes=2)
        expired = engine.expired_sessions()

        assert [r["id"] for r in expired] == [room["id"]]
        assert expired[0]["status"] == "occupied"
        assert engine.live_cost(room["id"]).overdue is True
