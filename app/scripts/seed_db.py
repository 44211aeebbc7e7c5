"""
Výchozí data: nastavení webu a základní kategorie.
Skript lze spouštět opakovaně, existující záznamy se nemění.
"""
from sqlalchemy.orm import Session
from core.database import SessionLocal
from core.site_settings_service import get_or_create_settings
from models import Category

DEFAULT_CATEGORIES = [
    {"name": "Chléb", "slug": "chleby"},
    {"name": "Běžné pečivo", "slug": "bezne-pecivo"},
    {"name": "Jemné pečivo", "slug": "jemne-pecivo"},
]


def seed_categories(db: Session) -> int:
    """Doplnit chybějící kategorie, vrací počet nově vytvořených"""
    created = 0
    for data in DEFAULT_CATEGORIES:
        exists = db.query(Category).filter(Category.slug == data["slug"]).first()
        if not exists:
            db.add(Category(**data))
            created += 1
    db.commit()
    return created


def seed_data(db: Session) -> None:
    print("🌱 Plním databázi výchozími daty...")

    get_or_create_settings(db)
    print("✅ Nastavení webu")

    created = seed_categories(db)
    print(f"✅ Kategorie (nových: {created})")


if __name__ == "__main__":
    db = SessionLocal()
    try:
        seed_data(db)
    finally:
        db.close()
