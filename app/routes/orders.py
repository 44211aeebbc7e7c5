"""
Objednávky zákazníka: pokladna, historie, úprava a storno čekající objednávky.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from typing import Optional

from core.database import get_db
from core.dependencies import get_current_user
from core.redis_service import CartService
from core.checkout_service import (
    validate_delivery_date,
    validate_invoice_eligibility,
    normalize_zip,
    merge_item_quantities,
    price_items,
    generate_order_number
)
from core.order_status_service import transition_order
from core.notification_email_service import order_notification_service
from models.user import User, UserRole
from models.order import (
    Order,
    OrderItem,
    OrderStatus,
    DeliveryMethod,
    PaymentType,
    PaymentStatus
)
from models.addresses import Address
from schemas.orders import OrderCreate, OrderItemIn, OrderItemsUpdate

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5

router = APIRouter(
    prefix="/orders",
    tags=["orders"]
)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def format_order_summary(order: Order) -> dict:
    """Řádek v seznamu objednávek"""
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status.value,
        "total_price": float(order.total_price),
        "created_at": _iso(order.created_at),
        "delivery_method": order.delivery_method.value,
        "requested_delivery_date": _iso(order.requested_delivery_date),
        "payment_type": order.payment_type.value,
        "order_type": order.order_type.value,
        "recurrence": order.recurrence.value if order.recurrence else None
    }


def format_order_detail(order: Order) -> dict:
    """Detail objednávky s položkami, adresou a milníky"""
    data = format_order_summary(order)
    data.update({
        "user_id": str(order.user_id),
        "payment_status": order.payment_status.value if order.payment_status else None,
        "payment_id": order.payment_id,
        "note": order.note,
        "delivery_address": {
            "street": order.delivery_street,
            "city": order.delivery_city,
            "zip": order.delivery_zip
        } if order.delivery_method == DeliveryMethod.DELIVERY else None,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name if item.product else None,
                "quantity": item.quantity,
                "price": float(item.price),
                "subtotal": float(item.price * item.quantity)
            }
            for item in order.items
        ],
        "updated_at": _iso(order.updated_at),
        "confirmed_at": _iso(order.confirmed_at),
        "baking_at": _iso(order.baking_at),
        "ready_at": _iso(order.ready_at),
        "completed_at": _iso(order.completed_at),
        "cancelled_at": _iso(order.cancelled_at)
    })
    return data


def order_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "success": False,
            "status_code": 404,
            "message": "Objednávka nenalezena",
            "error": "ORDER_NOT_FOUND"
        }
    )


def load_order(db: Session, order_id: int) -> Optional[Order]:
    return db.query(Order).options(
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.user)
    ).filter(Order.id == order_id).first()


async def notify_status(order: Order) -> None:
    """Poslat zákazníkovi email o stavu; chyba odeslání objednávku neruší."""
    sent = await order_notification_service.send_order_status_email(order)
    if not sent:
        logger.warning("Email ke stavu objednávky %s se nepodařilo odeslat", order.order_number)


def _resolve_delivery_address(db: Session, order_data: OrderCreate, user: User) -> dict:
    """Snapshot adresy doručení (u PICKUP prázdný)."""
    if order_data.delivery_method == DeliveryMethod.PICKUP:
        return {"delivery_street": None, "delivery_city": None, "delivery_zip": None}

    if order_data.address_id is not None:
        address = db.query(Address).filter(
            Address.id == order_data.address_id,
            Address.user_id == user.id
        ).first()
        if not address:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={
                    "success": False,
                    "status_code": 404,
                    "message": "Adresa nenalezena",
                    "error": "ADDRESS_NOT_FOUND"
                }
            )
        return {
            "delivery_street": address.street,
            "delivery_city": address.city,
            "delivery_zip": normalize_zip(address.zip_code)
        }

    if order_data.delivery_address is not None:
        return {
            "delivery_street": order_data.delivery_address.street.strip(),
            "delivery_city": order_data.delivery_address.city.strip(),
            "delivery_zip": normalize_zip(order_data.delivery_address.zip)
        }

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "success": False,
            "status_code": 400,
            "message": "Pro doručení vyplňte adresu",
            "error": "DELIVERY_ADDRESS_REQUIRED"
        }
    )


# ==================== POKLADNA ====================

@router.post("", status_code=201)
async def create_order(
    order_data: OrderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Vytvořit objednávku.

    Kontroly v tomto pořadí:
    - alespoň jedna položka (stejné produkty se sečtou)
    - frekvence u opakované objednávky
    - uzávěrka v 15:00 předchozího dne
    - adresa pro doručení
    - platba na fakturu jen pro firmy
    - produkty existují a jsou v nabídce

    Ceny se berou z katalogu, košík se po použití vyprázdní.
    """
    cart_id = CartService.user_cart_id(current_user.id)

    if order_data.from_cart:
        cart = CartService.get_cart(cart_id)
        raw_items = [
            OrderItemIn(product_id=int(product_id), quantity=item["quantity"])
            for product_id, item in cart.items()
        ]
    else:
        raw_items = order_data.items or []

    if not raw_items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Objednávka musí obsahovat alespoň jednu položku",
                "error": "EMPTY_ORDER"
            }
        )

    items = merge_item_quantities(raw_items)

    validate_delivery_date(order_data.requested_delivery_date)

    address_snapshot = _resolve_delivery_address(db, order_data, current_user)

    if order_data.payment_type == PaymentType.INVOICE:
        validate_invoice_eligibility(current_user)

    priced_items, total_price = price_items(db, items)

    # Souběžná objednávka mohla obsadit stejné číslo; zkusí se nové
    for attempt in range(ORDER_NUMBER_ATTEMPTS):
        order_number = generate_order_number(db)
        order = Order(
            order_number=order_number,
            user_id=current_user.id,
            status=OrderStatus.PENDING,
            order_type=order_data.order_type,
            recurrence=order_data.recurrence,
            payment_type=order_data.payment_type,
            payment_status=PaymentStatus.UNPAID if order_data.payment_type == PaymentType.ONLINE_CARD else None,
            delivery_method=order_data.delivery_method,
            requested_delivery_date=order_data.requested_delivery_date,
            note=order_data.note,
            total_price=total_price,
            **address_snapshot
        )
        order.items = [
            OrderItem(
                product_id=item["product_id"],
                quantity=item["quantity"],
                price=item["price"]
            )
            for item in priced_items
        ]

        db.add(order)
        try:
            db.commit()
            break
        except IntegrityError:
            db.rollback()
            if attempt == ORDER_NUMBER_ATTEMPTS - 1:
                raise
            logger.warning("Číslo objednávky %s je obsazené, zkouším další", order_number)

    if order_data.from_cart:
        CartService.clear_cart(cart_id)

    order = load_order(db, order.id)
    logger.info("Nová objednávka %s (%s)", order.order_number, current_user.email)

    await notify_status(order)

    return {
        "success": True,
        "status_code": 201,
        "message": "Objednávka byla přijata",
        "data": format_order_detail(order)
    }


# ==================== HISTORIE ====================

@router.get("")
async def get_my_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filtr podle stavu"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Objednávky přihlášeného uživatele, nejnovější první.
    """
    query = db.query(Order).filter(Order.user_id == current_user.id)

    if status_filter:
        query = query.filter(Order.status == status_filter)

    total = query.count()

    offset = (page - 1) * limit
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()

    total_pages = (total + limit - 1) // limit

    return {
        "success": True,
        "status_code": 200,
        "message": "Objednávky načteny",
        "data": {
            "orders": [format_order_summary(order) for order in orders],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1
            }
        }
    }


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Detail objednávky. Admin vidí všechny, ostatní jen své.
    """
    order = load_order(db, order_id)

    if not order or (order.user_id != current_user.id and current_user.role != UserRole.ADMIN):
        raise order_not_found()

    return {
        "success": True,
        "status_code": 200,
        "message": "Objednávka načtena",
        "data": format_order_detail(order)
    }


# ==================== ÚPRAVA A STORNO ====================

@router.patch("/{order_id}")
async def update_order_items(
    order_id: int,
    update_data: OrderItemsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Upravit položky vlastní objednávky, dokud čeká na schválení.

    Položky se nahradí najednou (jedna transakce) a cena se přepočítá
    podle aktuálního katalogu.
    """
    order = load_order(db, order_id)

    if not order or order.user_id != current_user.id:
        raise order_not_found()

    if order.status != OrderStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Objednávku lze upravit jen před schválením",
                "error": "ORDER_NOT_EDITABLE"
            }
        )

    items = merge_item_quantities(update_data.items)
    priced_items, total_price = price_items(db, items, require_available=False)

    order.items.clear()
    db.flush()
    order.items.extend(
        OrderItem(
            product_id=item["product_id"],
            quantity=item["quantity"],
            price=item["price"]
        )
        for item in priced_items
    )
    order.total_price = total_price

    db.commit()

    order = load_order(db, order_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Objednávka byla upravena",
        "data": format_order_detail(order)
    }


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Stornovat objednávku (vlastník nebo admin), jen ve stavu PENDING.
    """
    order = load_order(db, order_id)

    if not order:
        raise order_not_found()

    if order.user_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "success": False,
                "status_code": 403,
                "message": "Tuto objednávku nemůžete stornovat",
                "error": "FORBIDDEN"
            }
        )

    if order.status != OrderStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Stornovat lze jen objednávku, která čeká na schválení",
                "error": "ORDER_NOT_CANCELLABLE"
            }
        )

    transition_order(order, OrderStatus.CANCELLED)
    db.commit()
    db.refresh(order)

    await notify_status(order)

    return {
        "success": True,
        "status_code": 200,
        "message": "Objednávka byla stornována",
        "data": format_order_detail(order)
    }
