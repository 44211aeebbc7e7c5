"""
Přechody stavů objednávky a časové milníky.
"""
import logging
from datetime import datetime, timezone
from fastapi import HTTPException, status
from models.order import Order, OrderStatus

logger = logging.getLogger(__name__)

# Povolené přechody; COMPLETED a CANCELLED jsou konečné
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.BAKING},
    OrderStatus.BAKING: {OrderStatus.READY},
    OrderStatus.READY: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

MILESTONE_FIELDS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.BAKING: "baking_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.COMPLETED: "completed_at",
    OrderStatus.CANCELLED: "cancelled_at",
}

STATUS_LABELS = {
    OrderStatus.PENDING: "Čeká na schválení",
    OrderStatus.CONFIRMED: "Schváleno",
    OrderStatus.BAKING: "Ve výrobě",
    OrderStatus.READY: "Připraveno",
    OrderStatus.COMPLETED: "Dokončeno",
    OrderStatus.CANCELLED: "Zrušeno",
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


def apply_status(order: Order, new_status: OrderStatus) -> None:
    """
    Nastavit nový stav a zapsat milník, pokud ještě není vyplněný.
    Kontrolu přechodu dělá volající.
    """
    old_status = order.status
    order.status = new_status

    field = MILESTONE_FIELDS.get(new_status)
    if field and getattr(order, field) is None:
        setattr(order, field, datetime.now(timezone.utc))

    logger.info("Objednávka %s: %s -> %s", order.order_number, old_status.value, new_status.value)


def transition_order(order: Order, new_status: OrderStatus) -> None:
    """
    Změnit stav objednávky podle tabulky povolených přechodů.

    Raises:
        HTTPException 400 INVALID_STATUS_TRANSITION
    """
    if not can_transition(order.status, new_status):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": (
                    f"Objednávku ve stavu '{STATUS_LABELS[order.status]}' nelze převést "
                    f"do stavu '{STATUS_LABELS[new_status]}'"
                ),
                "error": "INVALID_STATUS_TRANSITION",
                "allowed": [s.value for s in ALLOWED_TRANSITIONS[order.status]]
            }
        )

    apply_status(order, new_status)
