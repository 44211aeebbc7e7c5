"""
Platby kartou online přes Stripe Checkout.
"""
import logging
import stripe
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import Optional

from core.database import get_db
from core.dependencies import get_current_user
from core.payment_service import payment_service
from core.config import settings
from models.user import User
from models.order import Order, OrderStatus, PaymentType, PaymentStatus
from routes.orders import load_order, order_not_found

router = APIRouter(prefix="/payments", tags=["payments"])
logger = logging.getLogger(__name__)


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


@router.post("/orders/{order_id}/checkout-session")
async def create_checkout_session(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Vytvořit Stripe Checkout session pro vlastní objednávku placenou kartou.

    ID session se uloží do payment_id, podle něj webhook objednávku najde.
    """
    if not payment_service.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "success": False,
                "status_code": 503,
                "message": "Platba kartou momentálně není dostupná",
                "error": "PAYMENTS_NOT_CONFIGURED"
            }
        )

    order = load_order(db, order_id)
    if not order or order.user_id != current_user.id:
        raise order_not_found()

    if order.payment_type != PaymentType.ONLINE_CARD:
        raise _bad_request("Objednávka není placená kartou online", "INVALID_PAYMENT_TYPE")

    if order.status == OrderStatus.CANCELLED:
        raise _bad_request("Objednávka je stornovaná", "ORDER_CANCELLED")

    if order.payment_status == PaymentStatus.PAID:
        raise _bad_request("Objednávka je již zaplacená", "ORDER_ALREADY_PAID")

    items = [
        {
            "title": item.product.name if item.product else f"Produkt {item.product_id}",
            "quantity": item.quantity,
            "unit_price": item.price
        }
        for item in order.items
    ]

    try:
        result = payment_service.provider.create_payment(
            currency=settings.CURRENCY,
            order_number=order.order_number,
            customer_email=current_user.email,
            items=items,
            success_url=f"{settings.FRONTEND_URL}/dekujeme?order={order.order_number}&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.FRONTEND_URL}/profil?order={order.order_number}",
            metadata={"order_id": str(order.id), "user_id": str(current_user.id)}
        )
    except stripe.StripeError as e:
        logger.error("Stripe session pro objednávku %s se nepodařilo vytvořit: %s", order.order_number, e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "success": False,
                "status_code": 502,
                "message": "Platební bránu se nepodařilo kontaktovat",
                "error": "PAYMENT_PROVIDER_ERROR"
            }
        )

    order.payment_id = result["payment_id"]
    db.commit()

    return {
        "success": True,
        "status_code": 200,
        "message": "Platba připravena",
        "data": {
            "session_id": result["payment_id"],
            "url": result["checkout_url"]
        }
    }


def _find_order(db: Session, session: dict) -> Optional[Order]:
    order_number = (session.get("metadata") or {}).get("order_number")
    if order_number:
        order = db.query(Order).filter(Order.order_number == order_number).first()
        if order:
            return order
    session_id = session.get("id")
    if session_id:
        return db.query(Order).filter(Order.payment_id == session_id).first()
    return None


def _set_payment_status(db: Session, session: dict, payment_status: PaymentStatus) -> None:
    order = _find_order(db, session)
    if not order:
        logger.warning("Webhook: objednávka pro session %s nenalezena", session.get("id"))
        return

    order.payment_status = payment_status
    if session.get("id"):
        order.payment_id = session["id"]
    db.commit()
    logger.info("Objednávka %s: platba %s", order.order_number, payment_status.value)


@router.post("/webhook/stripe")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Webhook Stripe.

    Zpracované události:
    - checkout.session.completed (payment_status == paid) -> PAID
    - checkout.session.async_payment_succeeded -> PAID
    - checkout.session.async_payment_failed -> FAILED

    Ostatní události se jen potvrdí.
    """
    if not payment_service.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "success": False,
                "status_code": 503,
                "message": "Platby nejsou nakonfigurované",
                "error": "PAYMENTS_NOT_CONFIGURED"
            }
        )

    payload = await request.body()
    signature = request.headers.get("stripe-signature", "")

    try:
        event = payment_service.provider.parse_webhook(payload, signature)
    except ValueError as e:
        logger.error("Neplatný Stripe webhook: %s", e)
        raise _bad_request("Neplatný webhook", "INVALID_WEBHOOK")

    event_type = event.get("type")
    session = (event.get("data") or {}).get("object") or {}

    logger.info("Stripe webhook: %s (%s)", event_type, event.get("id"))

    if event_type == "checkout.session.completed":
        if session.get("payment_status") == "paid":
            _set_payment_status(db, session, PaymentStatus.PAID)

    elif event_type == "checkout.session.async_payment_succeeded":
        _set_payment_status(db, session, PaymentStatus.PAID)

    elif event_type == "checkout.session.async_payment_failed":
        _set_payment_status(db, session, PaymentStatus.FAILED)

    return {"success": True, "status_code": 200, "message": "Webhook přijat"}
