"""Review DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.reviews.models import MAX_RATING, MIN_RATING, Review


class CreateReviewSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    order_id = serializers.UUIDField()
    rating = serializers.IntegerField(min_value=MIN_RATING, max_value=MAX_RATING)
    comment = serializers.CharField(required=False, default="", allow_blank=True)


class UpdateReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(
        min_value=MIN_RATING, max_value=MAX_RATING, required=False
    )
    comment = serializers.CharField(required=False, allow_blank=True)


class ReviewVisibilitySerializer(serializers.Serializer):
    is_visible = serializers.BooleanField()


class EligibilityQuerySerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    product_id = serializers.UUIDField()


class ReviewSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "user_id",
            "username",
            "product_id",
            "product_name",
            "order_id",
            "rating",
            "comment",
            "is_visible",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
