"""
Platba kartou přes Stripe Checkout a webhook.
"""
import json
from types import SimpleNamespace

import pytest
import stripe

from core.payment_service import payment_service
from core.payment_providers.stripe import StripeProvider
from models.order import Order, PaymentStatus
from conftest import auth_headers


@pytest.fixture
def stripe_sessions(monkeypatch):
    """Stripe bez volání do sítě; vytvořené session se ukládají do seznamu"""
    created = []

    def fake_create(**kwargs):
        created.append(kwargs)
        return SimpleNamespace(id=f"cs_test_{len(created)}", url=f"https://checkout.stripe.test/{len(created)}")

    monkeypatch.setattr(payment_service, "_provider", StripeProvider(api_key="sk_test", webhook_secret=""))
    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    return created


@pytest.fixture
def card_order(customer_headers, bread, roll, place_order):
    return place_order(
        customer_headers,
        [{"product_id": bread.id, "quantity": 1}, {"product_id": roll.id, "quantity": 3}],
        payment_type="ONLINE_CARD"
    )


def post_webhook(client, event_type, session):
    payload = json.dumps({"id": "evt_1", "type": event_type, "data": {"object": session}})
    return client.post("/payments/webhook/stripe", content=payload, headers={"stripe-signature": "t=1,v1=x"})


def test_checkout_not_configured(client, customer_headers, card_order):
    response = client.post(f"/payments/orders/{card_order['id']}/checkout-session", headers=customer_headers)

    assert response.status_code == 503
    assert response.json()["detail"]["error"] == "PAYMENTS_NOT_CONFIGURED"


def test_create_checkout_session(client, db, customer, customer_headers, card_order, stripe_sessions):
    response = client.post(f"/payments/orders/{card_order['id']}/checkout-session", headers=customer_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data == {"session_id": "cs_test_1", "url": "https://checkout.stripe.test/1"}

    sent = stripe_sessions[0]
    assert sent["customer_email"] == customer.email
    assert sent["metadata"]["order_number"] == card_order["order_number"]
    amounts = [(item["price_data"]["unit_amount"], item["quantity"]) for item in sent["line_items"]]
    assert amounts == [(6500, 1), (350, 3)]
    assert all(item["price_data"]["currency"] == "czk" for item in sent["line_items"])

    order = db.query(Order).filter(Order.id == card_order["id"]).first()
    assert order.payment_id == "cs_test_1"


def test_checkout_wrong_payment_type(client, customer_headers, bread, place_order, stripe_sessions):
    order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])

    response = client.post(f"/payments/orders/{order['id']}/checkout-session", headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "INVALID_PAYMENT_TYPE"


def test_checkout_foreign_order(client, other_customer, card_order, stripe_sessions):
    response = client.post(
        f"/payments/orders/{card_order['id']}/checkout-session",
        headers=auth_headers(other_customer)
    )

    assert response.status_code == 404


def test_checkout_cancelled_order(client, customer_headers, card_order, stripe_sessions):
    client.post(f"/orders/{card_order['id']}/cancel", headers=customer_headers)

    response = client.post(f"/payments/orders/{card_order['id']}/checkout-session", headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "ORDER_CANCELLED"


def test_checkout_provider_error(client, customer_headers, card_order, stripe_sessions, monkeypatch):
    def broken_create(**kwargs):
        raise stripe.APIConnectionError("Stripe nedostupný")

    monkeypatch.setattr(stripe.checkout.Session, "create", broken_create)

    response = client.post(f"/payments/orders/{card_order['id']}/checkout-session", headers=customer_headers)

    assert response.status_code == 502
    assert response.json()["detail"]["error"] == "PAYMENT_PROVIDER_ERROR"


def test_webhook_marks_order_paid(client, db, customer_headers, card_order, stripe_sessions):
    client.post(f"/payments/orders/{card_order['id']}/checkout-session", headers=customer_headers)

    response = post_webhook(client, "checkout.session.completed", {
        "id": "cs_test_1",
        "payment_status": "paid",
        "metadata": {"order_number": card_order["order_number"]}
    })

    assert response.status_code == 200
    order = db.query(Order).filter(Order.id == card_order["id"]).first()
    db.refresh(order)
    assert order.payment_status == PaymentStatus.PAID

    response = client.post(f"/payments/orders/{card_order['id']}/checkout-session", headers=customer_headers)
    assert response.json()["detail"]["error"] == "ORDER_ALREADY_PAID"


def test_webhook_unpaid_completion_ignored(client, db, card_order, stripe_sessions):
    post_webhook(client, "checkout.session.completed", {
        "id": "cs_test_x",
        "payment_status": "unpaid",
        "metadata": {"order_number": card_order["order_number"]}
    })

    order = db.query(Order).filter(Order.id == card_order["id"]).first()
    db.refresh(order)
    assert order.payment_status == PaymentStatus.UNPAID


def test_webhook_async_failure_by_session_id(client, db, customer_headers, card_order, stripe_sessions):
    client.post(f"/payments/orders/{card_order['id']}/checkout-session", headers=customer_headers)

    post_webhook(client, "checkout.session.async_payment_failed", {"id": "cs_test_1"})

    order = db.query(Order).filter(Order.id == card_order["id"]).first()
    db.refresh(order)
    assert order.payment_status == PaymentStatus.FAILED


def test_webhook_unknown_order_acknowledged(client, stripe_sessions):
    response = post_webhook(client, "checkout.session.completed", {
        "id": "cs_neznama",
        "payment_status": "paid",
        "metadata": {"order_number": "OBJ-0"}
    })

    assert response.status_code == 200


def test_webhook_invalid_signature(client, monkeypatch):
    monkeypatch.setattr(payment_service, "_provider", StripeProvider(api_key="sk_test", webhook_secret="whsec_test"))

    response = post_webhook(client, "checkout.session.completed", {"id": "cs_test_1"})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "INVALID_WEBHOOK"
