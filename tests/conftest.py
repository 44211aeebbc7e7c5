"""
Společné fixtures: SQLite v paměti, fakeredis místo Redisu, zachytávání emailů.
Proměnné prostředí se musí nastavit před importem aplikace.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "development"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="pekarstvi-uploads-")
os.environ["STRIPE_API_KEY"] = ""
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ["CSRF_PROTECTION_ENABLED"] = "false"
os.environ["SMTP_HOST"] = ""

from datetime import date, timedelta
from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core import redis_service
from core.database import Base, get_db
from core.email_service import EmailService
from core.payment_service import payment_service
from core.security import hash_password, create_token_pair
from models.user import User, UserRole
from models.products import Category, Product


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Heslo123"


@pytest.fixture
def db():
    """Čistá databáze pro každý test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """HTTP klient nad aplikací se sdílenou testovací session"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Košíky a blacklist tokenů ve fakeredis"""
    client = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_service, "redis_client", client)
    return client


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Odeslané emaily se místo SMTP ukládají do seznamu"""
    sent = []

    async def fake_send_email(self, to_email, subject, plain_content, html_content=None, reply_to=None):
        sent.append({
            "to": to_email,
            "subject": subject,
            "text": plain_content,
            "html": html_content,
            "reply_to": reply_to
        })
        return True

    monkeypatch.setattr(EmailService, "send_email", fake_send_email)
    return sent


@pytest.fixture(autouse=True)
def no_payment_provider(monkeypatch):
    """Bez Stripe klíče nejsou platby kartou nakonfigurované"""
    monkeypatch.setattr(payment_service, "_provider", None)


# ==================== UŽIVATELÉ ====================

def create_user(db, email, role=UserRole.USER, password=DEFAULT_PASSWORD, **kwargs):
    user = User(
        email=email,
        hashed_password=hash_password(password) if password else None,
        full_name=kwargs.pop("full_name", "Jan Novák"),
        role=role,
        **kwargs
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user) -> dict:
    tokens = create_token_pair(user)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def customer(db):
    return create_user(db, "zakaznik@pekarna-test.cz", full_name="Jana Dvořáková")


@pytest.fixture
def other_customer(db):
    return create_user(db, "soused@pekarna-test.cz", full_name="Petr Svoboda")


@pytest.fixture
def company_customer(db):
    return create_user(
        db,
        "firma@pekarna-test.cz",
        full_name="Karel Veselý",
        is_company=True,
        company_name="Bistro U Lípy s.r.o.",
        ico="12345678"
    )


@pytest.fixture
def employee(db):
    return create_user(db, "pekar@pekarna-test.cz", role=UserRole.EMPLOYEE, full_name="Pavel Pekař")


@pytest.fixture
def admin(db):
    return create_user(db, "admin@pekarna-test.cz", role=UserRole.ADMIN, full_name="Administrátor")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def employee_headers(employee):
    return auth_headers(employee)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


# ==================== KATALOG ====================

@pytest.fixture
def category(db):
    category = Category(name="Chléb", slug="chleby")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def bread(db, category):
    product = Product(name="Kváskový chléb", price=Decimal("65.00"), category_id=category.id, is_available=True)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def roll(db, category):
    product = Product(name="Rohlík", price=Decimal("3.50"), category_id=category.id, is_available=True)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def unavailable_product(db, category):
    product = Product(name="Vánočka", price=Decimal("120.00"), category_id=category.id, is_available=False)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


# ==================== OBJEDNÁVKY ====================

def delivery_day(days: int = 5) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def order_payload(items, **overrides) -> dict:
    payload = {
        "items": items,
        "delivery_method": "DELIVERY",
        "requested_delivery_date": delivery_day(),
        "delivery_address": {"street": "Bánov 52", "city": "Bánov", "zip": "687 54"},
        "payment_type": "CASH_ON_DELIVERY"
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def place_order(client):
    """Vytvořit objednávku přes API a vrátit data odpovědi"""
    def _place(headers, items, **overrides):
        response = client.post("/orders", json=order_payload(items, **overrides), headers=headers)
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return _place
