"""Payment gateway contract.

``OrderService`` only ever talks to this interface; which implementation
backs it is decided by the ``PAYMENT_GATEWAY`` setting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.payments.dtos import PaymentInitiation, PaymentResult


class IPaymentGateway(ABC):
    @abstractmethod
    def initiate(self, order: Order, amount: Decimal) -> PaymentInitiation:
        """Start a payment for *order* and return where to send the buyer.

        Raises:
            PaymentGatewayError: the gateway refused or could not be reached.
        """

    @abstractmethod
    def verify(self, reference: str) -> PaymentResult:
        """Look up the current state of the payment identified by *reference*."""
