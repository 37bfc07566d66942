"""Offline gateway used in development and tests."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING
from urllib.parse import urlencode

import structlog
from django.conf import settings

from modules.payments.dtos import PaymentInitiation, PaymentResult
from modules.payments.gateways.interfaces import IPaymentGateway

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class MockPaymentGateway(IPaymentGateway):
    """Points the buyer at the storefront's payment simulation page.

    Every lookup reports the payment as completed.
    """

    def __init__(self, base_url: str | None = None) -> None:
        self._base_url = (base_url or settings.STOREFRONT_BASE_URL).rstrip("/")

    def initiate(self, order: Order, amount: Decimal) -> PaymentInitiation:
        reference = f"mock-{uuid.uuid4().hex}"
        query = urlencode({"orderId": str(order.id), "amount": str(amount), "pidx": reference})
        logger.info("payment.mock.initiated", order_id=str(order.id), reference=reference)
        return PaymentInitiation(
            reference=reference,
            payment_url=f"{self._base_url}/payment-simulation?{query}",
        )

    def verify(self, reference: str) -> PaymentResult:
        logger.info("payment.mock.verified", reference=reference)
        return PaymentResult(
            reference=reference,
            status="completed",
            transaction_id=f"mock-transaction-{uuid.uuid4().hex[:12]}",
        )
