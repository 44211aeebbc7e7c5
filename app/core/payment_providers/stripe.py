"""
Stripe Checkout jako poskytovatel plateb.
"""

import json
import logging
from decimal import Decimal
from typing import Dict, Any, List, Optional

import stripe

from core.payment_service import PaymentProvider

logger = logging.getLogger(__name__)


class StripeProvider(PaymentProvider):
    """
    Platba kartou přes Stripe Checkout session.
    """

    def __init__(self, api_key: str, webhook_secret: str = ""):
        """
        Args:
            api_key: Secret key (test nebo produkce)
            webhook_secret: Signing secret pro ověření webhooků
        """
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.stripe = stripe

    def initialize(self) -> None:
        self.stripe.api_key = self.api_key
        logger.info("Stripe SDK inicializován")

    def create_payment(
        self,
        currency: str,
        order_number: str,
        customer_email: str,
        items: List[Dict[str, Any]],
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Vytvořit Checkout session. Částky se posílají v haléřích.
        """
        line_items = [
            {
                "price_data": {
                    "currency": currency.lower(),
                    "unit_amount": int((Decimal(str(item["unit_price"])) * 100).to_integral_value()),
                    "product_data": {"name": item["title"]},
                },
                "quantity": item["quantity"],
            }
            for item in items
        ]

        session_metadata = {"order_number": order_number}
        session_metadata.update(metadata or {})

        checkout_session = self.stripe.checkout.Session.create(
            payment_method_types=["card"],
            line_items=line_items,
            mode="payment",
            success_url=success_url,
            cancel_url=cancel_url,
            customer_email=customer_email,
            metadata=session_metadata,
            payment_intent_data={"metadata": session_metadata},
        )

        logger.info("Stripe checkout session %s vytvořena pro objednávku %s", checkout_session.id, order_number)

        return {
            "payment_id": checkout_session.id,
            "checkout_url": checkout_session.url,
            "status": "pending",
        }

    def parse_webhook(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """
        S nastaveným webhook secretem se nejdřív ověří podpis,
        bez něj se payload jen rozparsuje (lokální vývoj).
        """
        if self.webhook_secret:
            try:
                self.stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
            except stripe.SignatureVerificationError as e:
                raise ValueError(f"Neplatný podpis webhooku: {e}")

        return json.loads(payload)
