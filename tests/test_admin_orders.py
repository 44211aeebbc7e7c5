"""
Vyřizování objednávek pekárnou: přechody stavů, milníky, emaily, statistiky.
"""
from datetime import datetime

import pytest

from core.order_status_service import can_transition, apply_status
from models.order import Order, OrderStatus
from conftest import auth_headers, delivery_day


def move(client, headers, order_id, new_status, notify=True):
    return client.patch(
        f"/admin/orders/{order_id}/status",
        json={"status": new_status, "notify_customer": notify},
        headers=headers
    )


class TestTransitions:

    @pytest.mark.parametrize("current, new, allowed", [
        (OrderStatus.PENDING, OrderStatus.CONFIRMED, True),
        (OrderStatus.PENDING, OrderStatus.CANCELLED, True),
        (OrderStatus.PENDING, OrderStatus.BAKING, False),
        (OrderStatus.CONFIRMED, OrderStatus.BAKING, True),
        (OrderStatus.CONFIRMED, OrderStatus.CANCELLED, False),
        (OrderStatus.BAKING, OrderStatus.READY, True),
        (OrderStatus.READY, OrderStatus.COMPLETED, True),
        (OrderStatus.COMPLETED, OrderStatus.PENDING, False),
        (OrderStatus.CANCELLED, OrderStatus.CONFIRMED, False),
    ])
    def test_can_transition(self, current, new, allowed):
        assert can_transition(current, new) is allowed

    def test_milestone_not_overwritten(self):
        first_time = datetime(2026, 1, 5, 6, 0)
        order = Order(order_number="OBJ-1", status=OrderStatus.PENDING, confirmed_at=first_time)

        apply_status(order, OrderStatus.CONFIRMED)

        assert order.status == OrderStatus.CONFIRMED
        assert order.confirmed_at == first_time

    def test_full_workflow(self, client, employee_headers, customer_headers, bread, place_order, sent_emails):
        order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])
        sent_emails.clear()

        for new_status in ("CONFIRMED", "BAKING", "READY", "COMPLETED"):
            response = move(client, employee_headers, order["id"], new_status)
            assert response.status_code == 200, response.json()

        data = response.json()["data"]
        assert data["status"] == "COMPLETED"
        assert data["status_label"] == "Dokončeno"
        for field in ("confirmed_at", "baking_at", "ready_at", "completed_at"):
            assert data[field] is not None
        assert data["cancelled_at"] is None

        # BAKING se zákazníkovi neoznamuje
        subjects = [email["subject"] for email in sent_emails]
        assert len(subjects) == 3
        assert "Potvrzena a pečeme" in subjects[0]
        assert "Připraveno k vyzvednutí" in subjects[1]
        assert "Dokončeno" in subjects[2]

    def test_invalid_transition(self, client, employee_headers, customer_headers, bread, place_order):
        order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])

        response = move(client, employee_headers, order["id"], "READY")

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "INVALID_STATUS_TRANSITION"
        assert set(detail["allowed"]) == {"CONFIRMED", "CANCELLED"}

    def test_completed_order_is_final(self, client, db, admin_headers, customer_headers, bread, place_order):
        order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])
        db.query(Order).filter(Order.id == order["id"]).update({"status": OrderStatus.COMPLETED})
        db.commit()

        response = move(client, admin_headers, order["id"], "CANCELLED")

        assert response.status_code == 400

    def test_reject_pending_order(self, client, employee_headers, customer_headers, bread, place_order, sent_emails):
        order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])

        response = move(client, employee_headers, order["id"], "CANCELLED")

        assert response.status_code == 200
        assert response.json()["data"]["cancelled_at"] is not None
        assert "Stornována" in sent_emails[-1]["subject"]

    def test_notification_can_be_skipped(self, client, employee_headers, customer_headers, bread, place_order, sent_emails):
        order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])
        sent_emails.clear()

        response = move(client, employee_headers, order["id"], "CONFIRMED", notify=False)

        assert response.status_code == 200
        assert sent_emails == []

    def test_customer_cannot_change_status(self, client, customer_headers, bread, place_order):
        order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])

        response = move(client, customer_headers, order["id"], "CONFIRMED")

        assert response.status_code == 403

    def test_unknown_order(self, client, employee_headers):
        response = move(client, employee_headers, 999, "CONFIRMED")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "ORDER_NOT_FOUND"


class TestAdminList:

    def test_list_with_customer_info(self, client, employee_headers, customer, customer_headers, bread, place_order):
        place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])

        response = client.get("/admin/orders", headers=employee_headers)

        assert response.status_code == 200
        row = response.json()["data"]["orders"][0]
        assert row["customer_email"] == customer.email
        assert row["customer_name"] == customer.full_name
        assert row["status_label"] == "Čeká na schválení"

    def test_filters(self, client, employee_headers, customer_headers, other_customer, bread, place_order):
        pickup = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}], delivery_method="PICKUP")
        late = place_order(
            auth_headers(other_customer),
            [{"product_id": bread.id, "quantity": 1}],
            requested_delivery_date=delivery_day(20)
        )

        response = client.get("/admin/orders", params={"delivery_method": "PICKUP"}, headers=employee_headers)
        assert [o["id"] for o in response.json()["data"]["orders"]] == [pickup["id"]]

        response = client.get("/admin/orders", params={"search": "soused"}, headers=employee_headers)
        assert [o["id"] for o in response.json()["data"]["orders"]] == [late["id"]]

        response = client.get("/admin/orders", params={"search": pickup["order_number"]}, headers=employee_headers)
        assert [o["id"] for o in response.json()["data"]["orders"]] == [pickup["id"]]

        response = client.get(
            "/admin/orders",
            params={"date_from": delivery_day(10), "date_to": delivery_day(30)},
            headers=employee_headers
        )
        assert [o["id"] for o in response.json()["data"]["orders"]] == [late["id"]]

    def test_detail_with_company_data(self, client, employee_headers, company_customer, bread, place_order):
        order = place_order(
            auth_headers(company_customer),
            [{"product_id": bread.id, "quantity": 1}],
            payment_type="INVOICE"
        )

        response = client.get(f"/admin/orders/{order['id']}", headers=employee_headers)

        assert response.status_code == 200
        customer = response.json()["data"]["customer"]
        assert customer["company_name"] == "Bistro U Lípy s.r.o."
        assert customer["ico"] == "12345678"


class TestStats:

    def test_stats_summary(self, client, db, admin_headers, customer, customer_headers, other_customer, bread, place_order):
        done = place_order(customer_headers, [{"product_id": bread.id, "quantity": 2}])
        place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])
        cancelled = place_order(auth_headers(other_customer), [{"product_id": bread.id, "quantity": 10}])

        db.query(Order).filter(Order.id == done["id"]).update({"status": OrderStatus.COMPLETED})
        db.query(Order).filter(Order.id == cancelled["id"]).update({"status": OrderStatus.CANCELLED})
        db.commit()

        response = client.get("/admin/orders/stats/summary", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_revenue"] == 130.0
        assert data["pending_orders"] == 1
        assert data["customers_count"] == 2
        assert data["average_order_value_30d"] == 97.5
        assert data["orders_by_status"]["COMPLETED"] == 1
        assert data["orders_by_status"]["CANCELLED"] == 1
        assert data["orders_by_status"]["BAKING"] == 0

    def test_stats_admin_only(self, client, employee_headers):
        response = client.get("/admin/orders/stats/summary", headers=employee_headers)

        assert response.status_code == 403
