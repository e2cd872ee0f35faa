"""Product DRF serializers (output only).

Input validation lives in the pydantic DTOs of ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "image",
            "is_available",
            "is_featured",
            "preparation_minutes",
            "ingredients",
            "allergens",
            "tags",
            "calories",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
