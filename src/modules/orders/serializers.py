"""Order DRF serializers (output only).

Input validation lives in the pydantic DTOs of ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for a line item (catalog snapshot)."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "unit_price",
            "quantity",
            "notes",
            "subtotal",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and rating."""

    items = OrderItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source="customer.full_name", read_only=True)
    rating = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "customer_name",
            "status",
            "items",
            "delivery_address",
            "payment_method",
            "courier_id",
            "subtotal",
            "shipping_cost",
            "discount",
            "total",
            "notes",
            "estimated_minutes",
            "rating",
            "delivered_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_rating(self, obj: Order) -> dict | None:
        if not obj.is_rated:
            return None
        return {
            "score": obj.rating_score,
            "comment": obj.rating_comment,
            "rated_at": obj.rated_at,
        }


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested items)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "courier_id",
            "status",
            "payment_method",
            "total",
            "created_at",
        ]
        read_only_fields = fields
