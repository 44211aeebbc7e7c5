from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import enum

# Stavy objednávky
class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"          # Čeká na schválení pekařem
    CONFIRMED = "CONFIRMED"      # Schváleno
    BAKING = "BAKING"            # Ve výrobě
    READY = "READY"              # Připraveno k vyzvednutí / rozvozu
    COMPLETED = "COMPLETED"      # Předáno zákazníkovi
    CANCELLED = "CANCELLED"      # Zrušeno / zamítnuto

class OrderType(str, enum.Enum):
    ONE_TIME = "ONE_TIME"
    RECURRING = "RECURRING"

class Recurrence(str, enum.Enum):
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"

class PaymentType(str, enum.Enum):
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
    ONLINE_CARD = "ONLINE_CARD"
    INVOICE = "INVOICE"              # Jen pro firmy s IČO

class PaymentStatus(str, enum.Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    FAILED = "FAILED"

class DeliveryMethod(str, enum.Enum):
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING, index=True)
    order_type = Column(SQLEnum(OrderType), nullable=False, default=OrderType.ONE_TIME)
    recurrence = Column(SQLEnum(Recurrence), nullable=True)

    # Platba
    payment_type = Column(SQLEnum(PaymentType), nullable=False, default=PaymentType.CASH_ON_DELIVERY)
    payment_status = Column(SQLEnum(PaymentStatus), nullable=True)  # Jen u ONLINE_CARD
    payment_id = Column(String(255), nullable=True, index=True)    # ID Stripe session

    # Doručení (snapshot adresy v okamžiku objednávky)
    delivery_method = Column(SQLEnum(DeliveryMethod), nullable=False, default=DeliveryMethod.DELIVERY)
    requested_delivery_date = Column(Date, nullable=False)
    delivery_street = Column(String(255), nullable=True)
    delivery_city = Column(String(120), nullable=True)
    delivery_zip = Column(String(10), nullable=True)

    note = Column(Text, nullable=True)
    total_price = Column(Numeric(10, 2), nullable=False)

    # Časy
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    baking_at = Column(DateTime(timezone=True), nullable=True)
    ready_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Vztahy
    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id"
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # Jednotková cena v okamžiku objednávky

    # Vztahy
    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")
