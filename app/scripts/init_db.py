"""
Inicializace databáze: vytvoří tabulky a prvního administrátora.

Spuštění z adresáře app/:
    ADMIN_EMAIL=... ADMIN_PASSWORD=... python -m scripts.init_db
"""
import os
from typing import Optional
from sqlalchemy.orm import Session
from core.database import engine, Base, SessionLocal
from core.security import hash_password
from models import User, UserRole


def init_db():
    """Vytvořit všechny tabulky (existující zůstanou)"""
    print("🔨 Vytvářím tabulky...")
    Base.metadata.create_all(bind=engine)
    print("✅ Tabulky vytvořeny")


def create_admin(db: Session, email: str, password: str, full_name: str = "Administrátor") -> Optional[User]:
    """
    Založit administrátora. Existující účet se stejným emailem
    se jen povýší na ADMIN.
    """
    user = db.query(User).filter(User.email == email).first()
    if user:
        if user.role != UserRole.ADMIN:
            user.role = UserRole.ADMIN
            db.commit()
            print(f"⬆️  Účet {email} povýšen na administrátora")
        else:
            print(f"ℹ️  Administrátor {email} už existuje")
        return user

    user = User(
        email=email,
        hashed_password=hash_password(password),
        full_name=full_name,
        role=UserRole.ADMIN,
        is_active=True,
        auth_provider="local"
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    print(f"✅ Administrátor {email} vytvořen")
    return user


def drop_db():
    """Smazat všechny tabulky"""
    print("⚠️  Mažu všechny tabulky...")
    Base.metadata.drop_all(bind=engine)
    print("✅ Tabulky smazány")


if __name__ == "__main__":
    init_db()

    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if admin_email and admin_password:
        db = SessionLocal()
        try:
            create_admin(db, admin_email, admin_password, os.getenv("ADMIN_NAME", "Administrátor"))
        finally:
            db.close()
    else:
        print("ℹ️  ADMIN_EMAIL / ADMIN_PASSWORD nejsou nastavené, administrátor se nevytváří")
