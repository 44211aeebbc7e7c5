import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base


class UserRole(str, enum.Enum):
    USER = "USER"            # Zákazník
    EMPLOYEE = "EMPLOYEE"    # Zaměstnanec pekárny (vyřizuje objednávky)
    ADMIN = "ADMIN"          # Administrátor


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=True)  # Nullable pro účty přes Google
    full_name = Column(String(255))
    phone = Column(String(30), nullable=True)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Fakturační údaje firmy (platba na fakturu)
    is_company = Column(Boolean, default=False, nullable=False)
    company_name = Column(String(255), nullable=True)
    ico = Column(String(20), nullable=True)
    dic = Column(String(20), nullable=True)

    # Google Auth
    firebase_uid = Column(String(255), unique=True, nullable=True, index=True)
    auth_provider = Column(String(50), default="local")  # "local" nebo "google"

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Vztahy
    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user")

    @property
    def can_pay_by_invoice(self) -> bool:
        return bool(self.is_company and self.company_name and self.ico)
