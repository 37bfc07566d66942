"""Payment gateway exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError


class PaymentGatewayError(DomainError):
    """The gateway was unreachable or rejected the request."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "payment_gateway_error"
    default_message = "Payment gateway request failed."
