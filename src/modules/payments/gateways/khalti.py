"""Khalti ePayment v2 client.

Amounts are sent in paisa (1 NPR = 100 paisa).  ``initiate`` returns the
``pidx`` Khalti issues; ``verify`` calls the lookup endpoint with it.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx
import structlog
from django.conf import settings

from modules.payments.dtos import PaymentInitiation, PaymentResult
from modules.payments.exceptions import PaymentGatewayError
from modules.payments.gateways.interfaces import IPaymentGateway

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)

_STATUS_MAP = {
    "Completed": "completed",
    "Pending": "pending",
    "Initiated": "pending",
    "Expired": "failed",
    "User canceled": "failed",
    "Refunded": "failed",
}


def to_paisa(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class KhaltiGateway(IPaymentGateway):
    def __init__(
        self,
        secret_key: Optional[str] = None,
        api_base: Optional[str] = None,
        site_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._secret_key = secret_key if secret_key is not None else settings.KHALTI_SECRET_KEY
        self._api_base = (api_base or settings.KHALTI_API_BASE).rstrip("/")
        self._site_url = (site_url or settings.STOREFRONT_BASE_URL).rstrip("/")
        self._timeout = timeout or settings.KHALTI_TIMEOUT_SECONDS
        self._transport = transport

    def initiate(self, order: Order, amount: Decimal) -> PaymentInitiation:
        paisa = to_paisa(amount)
        payload = {
            "return_url": f"{self._site_url}/payment-confirmation",
            "website_url": self._site_url,
            "amount": paisa,
            "purchase_order_id": str(order.id),
            "purchase_order_name": f"Order {order.order_number}",
            "customer_info": {
                "name": order.user.get_full_name() or order.user.get_username(),
                "email": order.user.email,
                "phone": order.phone,
            },
            "product_details": [
                {
                    "identity": str(order.id),
                    "name": f"Order {order.order_number}",
                    "total_price": paisa,
                    "quantity": 1,
                    "unit_price": paisa,
                }
            ],
        }
        data = self._post("/epayment/initiate/", payload)
        if "pidx" not in data or "payment_url" not in data:
            raise PaymentGatewayError("Khalti response is missing pidx or payment_url.")

        logger.info("payment.khalti.initiated", order_id=str(order.id), pidx=data["pidx"])
        return PaymentInitiation(reference=data["pidx"], payment_url=data["payment_url"])

    def verify(self, reference: str) -> PaymentResult:
        data = self._post("/epayment/lookup/", {"pidx": reference})
        khalti_status = data.get("status", "")
        status = _STATUS_MAP.get(khalti_status, "failed")
        total = data.get("total_amount")

        logger.info(
            "payment.khalti.verified",
            pidx=reference,
            khalti_status=khalti_status,
            status=status,
        )
        return PaymentResult(
            reference=reference,
            status=status,
            transaction_id=data.get("transaction_id"),
            amount=(Decimal(total) / 100) if total is not None else None,
            raw=data,
        )

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Authorization": f"Key {self._secret_key}"}
        try:
            with httpx.Client(
                base_url=self._api_base,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = client.post(path, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "payment.khalti.rejected",
                path=path,
                status_code=exc.response.status_code,
                body=exc.response.text[:500],
            )
            raise PaymentGatewayError(
                f"Khalti rejected the request ({exc.response.status_code})."
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("payment.khalti.unreachable", path=path, error=str(exc))
            raise PaymentGatewayError("Khalti could not be reached.") from exc
        return response.json()
