"""
Platební služba s abstraktním rozhraním poskytovatele.
Aktuálně jediný poskytovatel: Stripe Checkout (platba kartou online).
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional


class PaymentProvider(ABC):
    """
    Rozhraní poskytovatele plateb.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Inicializovat SDK poskytovatele."""

    @abstractmethod
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
        Vytvořit platbu.

        Args:
            items: [{title, quantity, unit_price}]

        Returns:
            Dict s klíči payment_id, checkout_url, status
        """

    @abstractmethod
    def parse_webhook(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """
        Ověřit a rozparsovat webhook.

        Raises:
            ValueError: neplatný podpis nebo payload
        """


class PaymentService:
    """
    Drží aktivního poskytovatele (podle konfigurace).
    """

    def __init__(self):
        self._provider: Optional[PaymentProvider] = None

    def initialize(self, provider_name: str, **config) -> None:
        if provider_name == "stripe":
            from core.payment_providers.stripe import StripeProvider
            self._provider = StripeProvider(**config)
        else:
            raise ValueError(f"Nepodporovaný poskytovatel plateb: {provider_name}")

        self._provider.initialize()

    @property
    def is_configured(self) -> bool:
        return self._provider is not None

    @property
    def provider(self) -> PaymentProvider:
        if not self._provider:
            raise RuntimeError("Payment service not initialized")
        return self._provider


payment_service = PaymentService()
