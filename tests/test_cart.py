"""
Košík v Redisu: návštěvník (X-Cart-Id) i přihlášený uživatel.
"""
from core.redis_service import CartService, CART_TTL_SECONDS
from conftest import auth_headers


GUEST = {"X-Cart-Id": "host-abc"}


def test_guest_cart_id_issued(client):
    response = client.post("/cart/guest")

    assert response.status_code == 201
    assert len(response.json()["data"]["cart_id"]) >= 16


def test_cart_requires_identifier(client):
    response = client.get("/cart")

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "CART_ID_REQUIRED"


def test_add_items_and_totals(client, bread, roll):
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 2}, headers=GUEST)
    response = client.post("/cart/items", json={"product_id": roll.id, "quantity": 10}, headers=GUEST)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["cart_id"] == "guest:host-abc"
    assert data["total_items"] == 12
    assert data["total_amount"] == 165.0
    subtotals = {item["product_id"]: item["subtotal"] for item in data["items"]}
    assert subtotals == {bread.id: 130.0, roll.id: 35.0}


def test_same_product_quantities_add_up_to_limit(client, bread):
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 60}, headers=GUEST)
    response = client.post("/cart/items", json={"product_id": bread.id, "quantity": 60}, headers=GUEST)

    assert response.json()["data"]["items"][0]["quantity"] == 99


def test_add_unknown_product(client):
    response = client.post("/cart/items", json={"product_id": 999, "quantity": 1}, headers=GUEST)

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "PRODUCT_NOT_FOUND"


def test_add_unavailable_product(client, unavailable_product):
    response = client.post("/cart/items", json={"product_id": unavailable_product.id}, headers=GUEST)

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "PRODUCT_NOT_AVAILABLE"


def test_quantity_out_of_range(client, bread):
    response = client.post("/cart/items", json={"product_id": bread.id, "quantity": 100}, headers=GUEST)

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


def test_product_taken_off_sale_excluded_from_total(client, db, bread, roll):
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 1}, headers=GUEST)
    client.post("/cart/items", json={"product_id": roll.id, "quantity": 2}, headers=GUEST)

    bread.is_available = False
    db.commit()

    data = client.get("/cart", headers=GUEST).json()["data"]
    assert len(data["items"]) == 2
    assert data["total_items"] == 2
    assert data["total_amount"] == 7.0


def test_update_and_remove_item(client, bread, roll):
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 1}, headers=GUEST)
    client.post("/cart/items", json={"product_id": roll.id, "quantity": 1}, headers=GUEST)

    response = client.put(f"/cart/items/{bread.id}", json={"quantity": 4}, headers=GUEST)
    assert response.status_code == 200
    assert client.get("/cart/count", headers=GUEST).json()["data"]["count"] == 5

    response = client.delete(f"/cart/items/{roll.id}", headers=GUEST)
    assert [item["product_id"] for item in response.json()["data"]["items"]] == [bread.id]


def test_update_missing_item(client, bread):
    response = client.put(f"/cart/items/{bread.id}", json={"quantity": 2}, headers=GUEST)

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "CART_ITEM_NOT_FOUND"


def test_clear_cart(client, bread, fake_redis):
    client.post("/cart/items", json={"product_id": bread.id}, headers=GUEST)

    response = client.delete("/cart", headers=GUEST)

    assert response.status_code == 200
    assert not fake_redis.exists("cart:guest:host-abc")


def test_cart_has_expiry(client, bread, fake_redis):
    client.post("/cart/items", json={"product_id": bread.id}, headers=GUEST)

    ttl = fake_redis.ttl("cart:guest:host-abc")
    assert 0 < ttl <= CART_TTL_SECONDS


def test_logged_in_user_cart_ignores_header(client, customer, customer_headers, bread):
    headers = dict(customer_headers, **GUEST)
    response = client.post("/cart/items", json={"product_id": bread.id}, headers=headers)

    assert response.json()["data"]["cart_id"] == f"user:{customer.id}"
    assert CartService.get_cart("guest:host-abc") == {}


def test_merge_guest_cart(client, customer, customer_headers, bread, roll):
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 2}, headers=GUEST)
    client.post("/cart/items", json={"product_id": roll.id, "quantity": 5}, headers=GUEST)
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 1}, headers=customer_headers)

    response = client.post("/cart/merge", json={"guest_cart_id": "host-abc"}, headers=customer_headers)

    assert response.status_code == 200
    quantities = {item["product_id"]: item["quantity"] for item in response.json()["data"]["items"]}
    assert quantities == {bread.id: 3, roll.id: 5}
    assert CartService.get_cart("guest:host-abc") == {}


def test_merge_requires_login(client):
    response = client.post("/cart/merge", json={"guest_cart_id": "host-abc"})

    assert response.status_code == 401


def test_carts_are_separate_per_user(client, customer_headers, other_customer, bread):
    client.post("/cart/items", json={"product_id": bread.id}, headers=customer_headers)

    response = client.get("/cart", headers=auth_headers(other_customer))

    assert response.json()["data"]["items"] == []
