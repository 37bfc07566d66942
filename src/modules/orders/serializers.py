"""Order DRF serializers for API input.

Serializers validate the HTTP payload shape; business rules live in
``OrderService``, which receives Pydantic DTOs from ``dtos.py``.  Responses
are built by ``presenters``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus, PaymentMethod


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single item in an order creation request."""

    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, min_value=0
    )


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    items = CreateOrderItemSerializer(many=True)
    shipping_address = serializers.CharField()
    phone = serializers.CharField(max_length=20)
    city = serializers.CharField(required=False, default="", allow_blank=True)
    notes = serializers.CharField(required=False, default="", allow_blank=True)
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices, default=PaymentMethod.COD
    )

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError(
                "An order needs at least one item.", code="empty"
            )
        return value


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class VerifyPaymentSerializer(serializers.Serializer):
    pidx = serializers.CharField()
