"""Payment gateway implementations and the settings-driven factory."""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from modules.payments.gateways.interfaces import IPaymentGateway
from modules.payments.gateways.khalti import KhaltiGateway
from modules.payments.gateways.mock import MockPaymentGateway

_GATEWAYS = {
    "mock": MockPaymentGateway,
    "khalti": KhaltiGateway,
}


def get_payment_gateway() -> IPaymentGateway:
    """Instantiate the gateway named by ``settings.PAYMENT_GATEWAY``."""
    name = settings.PAYMENT_GATEWAY
    try:
        gateway_class = _GATEWAYS[name]
    except KeyError:
        raise ImproperlyConfigured(f"Unknown PAYMENT_GATEWAY {name!r}.") from None
    return gateway_class()


__all__ = [
    "IPaymentGateway",
    "KhaltiGateway",
    "MockPaymentGateway",
    "get_payment_gateway",
]
