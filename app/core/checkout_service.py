"""
Pravidla pokladny: uzávěrka objednávek, platba na fakturu, výpočet ceny.

Ceny se vždy berou z aktuálního katalogu, nikdy od klienta.
"""
import re
import time as time_module
from datetime import datetime, date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from core.config import settings
from models.order import Order
from models.products import Product
from models.user import User


def _bad_request(message: str, error: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "success": False,
            "status_code": 400,
            "message": message,
            "error": error
        }
    )


# ==================== TERMÍN DODÁNÍ ====================

def business_now() -> datetime:
    """Aktuální čas v časové zóně pekárny."""
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE))


def earliest_delivery_date(now: Optional[datetime] = None) -> date:
    """
    Nejbližší možný den dodání.

    Objednávat lze nejpozději do 15:00 předchozího dne: do 15:00 je to zítřek,
    po 15:00 až pozítří.
    """
    now = now or business_now()
    cutoff = settings.ORDER_CUTOFF_HOUR
    is_after_cutoff = now.hour > cutoff or (now.hour == cutoff and now.minute > 0)
    return now.date() + timedelta(days=2 if is_after_cutoff else 1)


def validate_delivery_date(requested: date, now: Optional[datetime] = None) -> None:
    if requested < earliest_delivery_date(now):
        raise _bad_request(
            f"Objednávky jsou možné pouze do {settings.ORDER_CUTOFF_HOUR}:00 předchozího dne.",
            "DELIVERY_DATE_TOO_EARLY"
        )


# ==================== PLATBA ====================

def validate_invoice_eligibility(user: User) -> None:
    """Na fakturu mohou platit jen firmy s vyplněným názvem a IČO."""
    if not user.can_pay_by_invoice:
        raise _bad_request(
            "Platba na fakturu je dostupná pouze pro firemní zákazníky s vyplněným názvem firmy a IČO.",
            "INVOICE_NOT_ALLOWED"
        )


# ==================== POLOŽKY A CENA ====================

def normalize_zip(zip_code: str) -> str:
    """PSČ bez mezer ("687 54" -> "68754")."""
    return re.sub(r"\s+", "", zip_code or "")


def merge_item_quantities(items: Iterable) -> List[Dict[str, int]]:
    """
    Sloučit položky se stejným produktem (množství se sčítají).
    Pořadí podle prvního výskytu.
    """
    quantities: Dict[int, int] = {}
    for item in items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return [
        {"product_id": pid, "quantity": qty}
        for pid, qty in quantities.items()
    ]


def price_items(
    db: Session,
    items: List[Dict[str, int]],
    require_available: bool = True
) -> Tuple[List[Dict], Decimal]:
    """
    Ocenit položky aktuálními cenami produktů.

    Args:
        items: [{product_id, quantity}] (už sloučené)
        require_available: odmítnout produkty vyřazené z nabídky

    Returns:
        (seznam {product, product_id, quantity, price}, celková cena)
    """
    product_ids = [item["product_id"] for item in items]
    products = {
        product.id: product
        for product in db.query(Product).filter(Product.id.in_(product_ids)).all()
    }

    priced = []
    total = Decimal("0.00")
    for item in items:
        product = products.get(item["product_id"])

        if product is None:
            if require_available:
                raise _bad_request(f"Produkt {item['product_id']} neexistuje", "PRODUCT_NOT_AVAILABLE")
            raise _bad_request("Některé produkty nebyly nalezeny", "PRODUCTS_NOT_FOUND")

        if require_available and not product.is_available:
            raise _bad_request(f"Produkt {product.name} momentálně není v nabídce", "PRODUCT_NOT_AVAILABLE")

        price = Decimal(str(product.price))
        total += price * item["quantity"]
        priced.append({
            "product": product,
            "product_id": product.id,
            "quantity": item["quantity"],
            "price": price,
        })

    return priced, total.quantize(Decimal("0.01"))


def generate_order_number(db: Session) -> str:
    """Číslo objednávky OBJ-<timestamp v ms>, při kolizi se zkusí další."""
    while True:
        order_number = f"OBJ-{int(time_module.time() * 1000)}"
        exists = db.query(Order.id).filter(Order.order_number == order_number).first()
        if not exists:
            return order_number
        time_module.sleep(0.001)
