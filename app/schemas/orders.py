"""
Schémata objednávek.
"""
from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import date

from models.order import DeliveryMethod, OrderStatus, OrderType, PaymentType, Recurrence
from schemas.addresses import clean_zip_code


# ==================== POLOŽKY ====================

class OrderItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=99, description="Počet kusů (1-99)")


class DeliveryAddressIn(BaseModel):
    """Adresa doručení zadaná přímo v pokladně"""
    street: str = Field(..., min_length=2, max_length=255)
    city: str = Field(..., min_length=2, max_length=120)
    zip: str = Field(..., description="PSČ")

    @validator('zip')
    def validate_zip(cls, v):
        return clean_zip_code(v)


# ==================== POKLADNA ====================

class OrderCreate(BaseModel):
    """
    Vytvoření objednávky.

    Položky buď přímo v `items`, nebo `from_cart: true` (aktuální košík).
    Pro DELIVERY je potřeba `delivery_address` nebo `address_id` uložené adresy.
    """
    items: Optional[List[OrderItemIn]] = Field(None, description="Položky objednávky")
    from_cart: bool = Field(False, description="Použít položky z košíku")
    delivery_method: DeliveryMethod = DeliveryMethod.DELIVERY
    requested_delivery_date: date = Field(..., description="Požadovaný den dodání")
    delivery_address: Optional[DeliveryAddressIn] = None
    address_id: Optional[int] = Field(None, description="ID uložené adresy")
    payment_type: PaymentType = PaymentType.CASH_ON_DELIVERY
    order_type: OrderType = OrderType.ONE_TIME
    recurrence: Optional[Recurrence] = None
    note: Optional[str] = Field(None, max_length=500, description="Poznámka k objednávce")

    @validator('from_cart', always=True)
    def items_or_cart(cls, v, values):
        if not v and not values.get('items'):
            raise ValueError('Objednávka musí obsahovat alespoň jednu položku')
        return v

    @validator('recurrence', always=True)
    def recurrence_for_recurring(cls, v, values):
        order_type = values.get('order_type')
        if order_type == OrderType.RECURRING and v is None:
            raise ValueError('U opakované objednávky vyberte frekvenci')
        if order_type == OrderType.ONE_TIME:
            return None
        return v

    @validator('note')
    def clean_note(cls, v):
        if v is not None:
            v = v.strip()
        return v or None


class OrderItemsUpdate(BaseModel):
    """Úprava položek čekající objednávky zákazníkem"""
    items: List[OrderItemIn] = Field(..., min_length=1)


# ==================== STAV (ADMIN / ZAMĚSTNANEC) ====================

class OrderStatusUpdate(BaseModel):
    status: OrderStatus = Field(..., description="Nový stav")
    notify_customer: bool = Field(True, description="Poslat zákazníkovi email")
