"""
Správa zákazníků administrátorem: seznam, detail, role, blokace.
"""
import uuid

from models.user import UserRole
from conftest import create_user


def test_list_customers(client, admin_headers, customer, other_customer, place_order, customer_headers, bread):
    place_order(customer_headers, [{"product_id": bread.id, "quantity": 1}])

    response = client.get("/users/admin/customers", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    emails = {c["email"]: c for c in data["customers"]}
    assert customer.email in emails
    assert other_customer.email in emails
    assert emails[customer.email]["order_count"] == 1
    assert emails[other_customer.email]["order_count"] == 0
    assert data["pagination"]["total"] == 3


def test_search_and_filter_customers(client, admin_headers, customer, employee):
    response = client.get("/users/admin/customers", params={"query": "DVOŘÁK"}, headers=admin_headers)
    assert [c["email"] for c in response.json()["data"]["customers"]] == [customer.email]

    response = client.get("/users/admin/customers", params={"role": "EMPLOYEE"}, headers=admin_headers)
    assert [c["email"] for c in response.json()["data"]["customers"]] == [employee.email]


def test_customer_detail(client, admin_headers, customer, customer_headers, place_order, bread):
    client.post("/addresses", json={"street": "Bánov 52", "city": "Bánov", "zip_code": "687 54"}, headers=customer_headers)
    order = place_order(customer_headers, [{"product_id": bread.id, "quantity": 2}])

    response = client.get(f"/users/admin/customers/{customer.id}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["order_count"] == 1
    assert data["recent_orders"][0]["order_number"] == order["order_number"]
    assert data["addresses"][0]["zip_code"] == "68754"


def test_customer_detail_not_found(client, admin_headers):
    response = client.get(f"/users/admin/customers/{uuid.uuid4()}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "USER_NOT_FOUND"


def test_change_role(client, db, admin_headers, customer):
    response = client.patch(
        f"/users/admin/customers/{customer.id}/role",
        json={"role": "EMPLOYEE"},
        headers=admin_headers
    )

    assert response.status_code == 200
    db.refresh(customer)
    assert customer.role == UserRole.EMPLOYEE


def test_cannot_change_own_role(client, admin, admin_headers):
    response = client.patch(
        f"/users/admin/customers/{admin.id}/role",
        json={"role": "USER"},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "CANNOT_CHANGE_OWN_ROLE"


def test_block_customer(client, db, admin_headers, customer, customer_headers):
    response = client.patch(
        f"/users/admin/customers/{customer.id}/status",
        json={"is_active": False},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False

    response = client.get("/users/me/profile", headers=customer_headers)
    assert response.status_code == 403


def test_cannot_block_self(client, admin, admin_headers):
    response = client.patch(
        f"/users/admin/customers/{admin.id}/status",
        json={"is_active": False},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "CANNOT_CHANGE_OWN_STATUS"


def test_employee_cannot_manage_customers(client, db, employee_headers):
    other = create_user(db, "jiny@pekarna-test.cz")

    response = client.patch(
        f"/users/admin/customers/{other.id}/role",
        json={"role": "ADMIN"},
        headers=employee_headers
    )

    assert response.status_code == 403
