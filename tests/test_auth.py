"""
Testy přihlášení, registrace, tokenů a obnovení hesla.
Spustit: pytest tests/test_auth.py -v
"""
from datetime import datetime, timedelta, timezone

from core import firebase_service as firebase_module
from core.redis_service import CartService
from models.password_reset import PasswordResetToken
from models.user import User, UserRole
from conftest import auth_headers, create_user, DEFAULT_PASSWORD


class TestRegistration:
    """Registrace zákazníka"""

    def test_register_creates_customer(self, client, db):
        response = client.post("/auth/register", json={
            "email": "nova@pekarna-test.cz",
            "password": "Rohlik123",
            "full_name": "Nová Zákaznice",
            "phone": "+420 777 111 222"
        })

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "nova@pekarna-test.cz"
        assert data["user"]["role"] == "USER"
        assert "access_token" in response.cookies

        user = db.query(User).filter(User.email == "nova@pekarna-test.cz").first()
        assert user.role == UserRole.USER
        assert user.hashed_password != "Rohlik123"

    def test_register_duplicate_email(self, client, customer):
        response = client.post("/auth/register", json={
            "email": customer.email,
            "password": "Rohlik123",
            "full_name": "Někdo Jiný"
        })

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "EMAIL_ALREADY_EXISTS"

    def test_register_weak_password(self, client):
        response = client.post("/auth/register", json={
            "email": "slabe@pekarna-test.cz",
            "password": "rohliky1",
            "full_name": "Slabé Heslo"
        })

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "velké písmeno" in body["message"]

    def test_register_merges_guest_cart(self, client, db, bread):
        CartService.add_item(CartService.guest_cart_id("host-123"), bread.id, 2)

        response = client.post("/auth/register", json={
            "email": "kosik@pekarna-test.cz",
            "password": "Rohlik123",
            "full_name": "Košík Host",
            "guest_cart_id": "host-123"
        })
        assert response.status_code == 201

        user_id = response.json()["data"]["user"]["id"]
        cart = CartService.get_cart(CartService.user_cart_id(user_id))
        assert cart[str(bread.id)]["quantity"] == 2
        assert CartService.get_cart(CartService.guest_cart_id("host-123")) == {}


class TestLogin:
    """Přihlášení emailem a heslem"""

    def test_login_success_sets_cookies(self, client, customer):
        response = client.post("/auth/login", json={
            "email": customer.email,
            "password": DEFAULT_PASSWORD
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == customer.email
        assert "access_token" in response.cookies
        assert "refresh_token" in response.cookies
        assert "csrf_token" in response.cookies

        # Přihlášení přes cookie
        me = client.get("/auth/me")
        assert me.status_code == 200
        assert me.json()["data"]["email"] == customer.email
        client.cookies.clear()

    def test_login_wrong_password(self, client, customer):
        response = client.post("/auth/login", json={
            "email": customer.email,
            "password": "Spatne123"
        })

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_CREDENTIALS"

    def test_login_unknown_email(self, client):
        response = client.post("/auth/login", json={
            "email": "nikdo@pekarna-test.cz",
            "password": DEFAULT_PASSWORD
        })

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_CREDENTIALS"

    def test_login_inactive_user(self, client, db):
        create_user(db, "blokovany@pekarna-test.cz", is_active=False)

        response = client.post("/auth/login", json={
            "email": "blokovany@pekarna-test.cz",
            "password": DEFAULT_PASSWORD
        })

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "USER_INACTIVE"

    def test_google_account_cannot_login_with_password(self, client, db):
        create_user(db, "google@pekarna-test.cz", password=None, auth_provider="google")

        response = client.post("/auth/login", json={
            "email": "google@pekarna-test.cz",
            "password": DEFAULT_PASSWORD
        })

        assert response.status_code == 401


class TestGoogleLogin:
    """Přihlášení přes Google (Firebase)"""

    def test_google_login_creates_user(self, client, db, monkeypatch):
        monkeypatch.setattr(
            firebase_module.firebase_service,
            "verify_token",
            lambda token: {"uid": "firebase-uid-1", "email": "google@pekarna-test.cz", "name": "Google Uživatel"}
        )

        response = client.post("/auth/google-login", json={"firebase_token": "x" * 20})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_new_user"] is True
        assert data["user"]["auth_provider"] == "google"

        user = db.query(User).filter(User.email == "google@pekarna-test.cz").first()
        assert user.firebase_uid == "firebase-uid-1"
        assert user.hashed_password is None
        client.cookies.clear()

    def test_google_login_links_existing_account(self, client, db, customer, monkeypatch):
        monkeypatch.setattr(
            firebase_module.firebase_service,
            "verify_token",
            lambda token: {"uid": "firebase-uid-2", "email": customer.email}
        )

        response = client.post("/auth/google-login", json={"firebase_token": "x" * 20})

        assert response.status_code == 200
        assert response.json()["data"]["is_new_user"] is False
        db.refresh(customer)
        assert customer.firebase_uid == "firebase-uid-2"
        client.cookies.clear()

    def test_google_login_without_email(self, client, monkeypatch):
        monkeypatch.setattr(
            firebase_module.firebase_service,
            "verify_token",
            lambda token: {"uid": "firebase-uid-3"}
        )

        response = client.post("/auth/google-login", json={"firebase_token": "x" * 20})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "GOOGLE_USER_INFO_MISSING"


class TestTokens:
    """Přístup k chráněným endpointům, obnovení a odhlášení"""

    def test_me_requires_authentication(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "AUTHENTICATION_REQUIRED"

    def test_me_with_invalid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer neplatny.token.xyz"})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_TOKEN"

    def test_me_with_bearer_token(self, client, customer, customer_headers):
        response = client.get("/auth/me", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(customer.id)

    def test_refresh_token_from_body(self, client, customer):
        from core.security import create_token_pair
        tokens = create_token_pair(customer)

        response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["access_token"]
        assert "user" not in data
        client.cookies.clear()

    def test_refresh_rejects_access_token(self, client, customer):
        from core.security import create_token_pair
        tokens = create_token_pair(customer)

        response = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_TOKEN_TYPE"

    def test_refresh_without_token(self, client):
        response = client.post("/auth/refresh")

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "REFRESH_TOKEN_REQUIRED"

    def test_logout_revokes_token(self, client, customer_headers):
        response = client.post("/auth/logout", headers=customer_headers)
        assert response.status_code == 200

        response = client.get("/auth/me", headers=customer_headers)
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "TOKEN_REVOKED"

    def test_blocked_user_token_rejected(self, client, db, customer, customer_headers):
        customer.is_active = False
        db.commit()

        response = client.get("/auth/me", headers=customer_headers)

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "USER_INACTIVE"


class TestPasswordReset:
    """Zapomenuté heslo"""

    def test_forgot_password_sends_email(self, client, db, customer, sent_emails):
        response = client.post("/auth/forgot-password", json={"email": customer.email})

        assert response.status_code == 200
        assert len(sent_emails) == 1
        assert sent_emails[0]["to"] == customer.email
        assert "obnovit-heslo?token=" in sent_emails[0]["text"]

        tokens = db.query(PasswordResetToken).filter(PasswordResetToken.user_id == customer.id).all()
        assert len(tokens) == 1
        assert tokens[0].is_used is False

    def test_forgot_password_unknown_email_same_response(self, client, sent_emails):
        response = client.post("/auth/forgot-password", json={"email": "nikdo@pekarna-test.cz"})

        assert response.status_code == 200
        assert sent_emails == []

    def test_new_request_invalidates_old_tokens(self, client, db, customer):
        client.post("/auth/forgot-password", json={"email": customer.email})
        client.post("/auth/forgot-password", json={"email": customer.email})

        tokens = db.query(PasswordResetToken).filter(PasswordResetToken.user_id == customer.id).all()
        assert len(tokens) == 2
        assert sum(1 for t in tokens if not t.is_used) == 1

    def test_reset_password(self, client, db, customer):
        db.add(PasswordResetToken(
            user_id=customer.id,
            token="platny-token-123456",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1)
        ))
        db.commit()

        response = client.post("/auth/reset-password", json={
            "token": "platny-token-123456",
            "new_password": "NoveHeslo1",
            "confirm_password": "NoveHeslo1"
        })
        assert response.status_code == 200

        login = client.post("/auth/login", json={"email": customer.email, "password": "NoveHeslo1"})
        assert login.status_code == 200
        client.cookies.clear()

        # Token jde použít jen jednou
        response = client.post("/auth/reset-password", json={
            "token": "platny-token-123456",
            "new_password": "JineHeslo2",
            "confirm_password": "JineHeslo2"
        })
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_TOKEN"

    def test_reset_password_expired(self, client, db, customer):
        db.add(PasswordResetToken(
            user_id=customer.id,
            token="stary-token-1234567",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)
        ))
        db.commit()

        response = client.post("/auth/reset-password", json={
            "token": "stary-token-1234567",
            "new_password": "NoveHeslo1",
            "confirm_password": "NoveHeslo1"
        })

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "TOKEN_EXPIRED"

    def test_reset_password_mismatch(self, client):
        response = client.post("/auth/reset-password", json={
            "token": "nejaky-token-123456",
            "new_password": "NoveHeslo1",
            "confirm_password": "NoveHeslo2"
        })

        assert response.status_code == 400
        assert response.json()["message"] == "Hesla se neshodují"


class TestRoleAccess:
    """Role omezují přístup k administraci"""

    def test_customer_cannot_access_admin(self, client, customer_headers):
        response = client.get("/users/admin/customers", headers=customer_headers)

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "ADMIN_REQUIRED"

    def test_employee_cannot_access_admin_only(self, client, employee_headers):
        response = client.get("/users/admin/customers", headers=employee_headers)

        assert response.status_code == 403

    def test_employee_can_list_orders(self, client, employee_headers):
        response = client.get("/admin/orders", headers=employee_headers)

        assert response.status_code == 200

    def test_customer_cannot_list_all_orders(self, client, customer_headers):
        response = client.get("/admin/orders", headers=customer_headers)

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "INSUFFICIENT_ROLE"

    def test_token_carries_role(self, client, db):
        admin = create_user(db, "sef@pekarna-test.cz", role=UserRole.ADMIN)

        response = client.get("/auth/me", headers=auth_headers(admin))

        assert response.json()["data"]["role"] == "ADMIN"
