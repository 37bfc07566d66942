"""Product DRF serializers (interface layer)."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "category",
            "unit",
            "price",
            "stock",
            "in_stock",
            "status",
            "rating",
            "total_reviews",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class StockUpdateSerializer(serializers.Serializer):
    stock = serializers.IntegerField(min_value=0)
