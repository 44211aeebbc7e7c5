"""
Správa objednávek pro pekárnu (admin a zaměstnanci).
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func, or_
from typing import Optional
from datetime import date, datetime, timedelta, timezone

from core.database import get_db
from core.dependencies import get_current_admin_user, get_current_staff_user
from core.order_status_service import transition_order, STATUS_LABELS
from models.user import User, UserRole
from models.order import Order, OrderItem, OrderStatus, PaymentType, DeliveryMethod
from routes.orders import format_order_summary, format_order_detail, load_order, notify_status, order_not_found
from schemas.orders import OrderStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/orders",
    tags=["admin-orders"]
)


def _customer_data(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "is_company": user.is_company,
        "company_name": user.company_name,
        "ico": user.ico,
        "dic": user.dic
    }


def format_admin_order(order: Order) -> dict:
    """Detail objednávky pro pekárnu včetně kontaktu na zákazníka"""
    data = format_order_detail(order)
    data["status_label"] = STATUS_LABELS[order.status]
    data["customer"] = _customer_data(order.user) if order.user else None
    return data


# ==================== STATISTIKY (ADMIN) ====================

@router.get("/stats/summary")
async def get_orders_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Přehled pro dashboard (pouze admin).

    - Tržby z dokončených objednávek
    - Počet objednávek čekajících na schválení
    - Počet zákazníků (role USER)
    - Průměrná hodnota objednávky za 30 dní (bez stornovaných)
    - Počty objednávek podle stavu
    """
    total_revenue = db.query(func.sum(Order.total_price)).filter(
        Order.status == OrderStatus.COMPLETED
    ).scalar() or 0

    pending_orders = db.query(Order).filter(Order.status == OrderStatus.PENDING).count()

    customers_count = db.query(User).filter(User.role == UserRole.USER).count()

    month_ago = datetime.now(timezone.utc) - timedelta(days=30)
    average_order_value = db.query(func.avg(Order.total_price)).filter(
        Order.created_at >= month_ago,
        Order.status != OrderStatus.CANCELLED
    ).scalar() or 0

    status_counts = dict(
        db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    )

    return {
        "success": True,
        "status_code": 200,
        "message": "Statistiky načteny",
        "data": {
            "total_revenue": round(float(total_revenue), 2),
            "pending_orders": pending_orders,
            "customers_count": customers_count,
            "average_order_value_30d": round(float(average_order_value), 2),
            "orders_by_status": {
                order_status.value: status_counts.get(order_status, 0)
                for order_status in OrderStatus
            }
        }
    }


# ==================== SEZNAM A DETAIL ====================

@router.get("")
async def list_all_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filtr podle stavu"),
    payment_type: Optional[PaymentType] = Query(None, description="Filtr podle platby"),
    delivery_method: Optional[DeliveryMethod] = Query(None, description="Doručení / vyzvednutí"),
    search: Optional[str] = Query(None, description="Číslo objednávky, email nebo jméno zákazníka"),
    date_from: Optional[date] = Query(None, description="Den dodání od"),
    date_to: Optional[date] = Query(None, description="Den dodání do"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    """
    Všechny objednávky, nejnovější první (admin a zaměstnanci).

    Rozsah dat se vztahuje ke dni dodání, aby pekárna viděla, co péct.
    """
    query = db.query(Order).join(User, Order.user_id == User.id).options(selectinload(Order.user))

    if status_filter:
        query = query.filter(Order.status == status_filter)

    if payment_type:
        query = query.filter(Order.payment_type == payment_type)

    if delivery_method:
        query = query.filter(Order.delivery_method == delivery_method)

    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Order.order_number).like(pattern),
                func.lower(User.email).like(pattern),
                func.lower(User.full_name).like(pattern)
            )
        )

    if date_from:
        query = query.filter(Order.requested_delivery_date >= date_from)

    if date_to:
        query = query.filter(Order.requested_delivery_date <= date_to)

    total = query.count()

    offset = (page - 1) * limit
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()

    orders_data = []
    for order in orders:
        row = format_order_summary(order)
        row["status_label"] = STATUS_LABELS[order.status]
        row["customer_email"] = order.user.email
        row["customer_name"] = order.user.full_name
        orders_data.append(row)

    total_pages = (total + limit - 1) // limit

    return {
        "success": True,
        "status_code": 200,
        "message": "Objednávky načteny",
        "data": {
            "orders": orders_data,
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
async def get_order_detail_admin(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    """
    Detail objednávky s kontaktem zákazníka, firemními údaji a milníky.
    """
    order = load_order(db, order_id)
    if not order:
        raise order_not_found()

    return {
        "success": True,
        "status_code": 200,
        "message": "Objednávka načtena",
        "data": format_admin_order(order)
    }


# ==================== ZMĚNA STAVU ====================

@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: int,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    """
    Posunout objednávku do dalšího stavu.

    Povolené přechody:
    - PENDING -> CONFIRMED / CANCELLED
    - CONFIRMED -> BAKING
    - BAKING -> READY
    - READY -> COMPLETED

    Při prvním vstupu do stavu se zapíše čas milníku. Zákazník dostane
    email, pokud `notify_customer` není vypnuté (BAKING se neoznamuje).
    """
    order = load_order(db, order_id)
    if not order:
        raise order_not_found()

    old_status = order.status
    transition_order(order, status_update.status)
    db.commit()
    db.refresh(order)

    logger.info(
        "Stav objednávky %s změnil %s: %s -> %s",
        order.order_number, current_user.email, old_status.value, order.status.value
    )

    if status_update.notify_customer:
        await notify_status(order)

    return {
        "success": True,
        "status_code": 200,
        "message": f"Stav objednávky změněn na '{STATUS_LABELS[order.status]}'",
        "data": format_admin_order(order)
    }
