"""Customer DRF serializers (output only).

Input validation lives in the pydantic DTOs of ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Customer


class AddressSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    street = serializers.CharField(read_only=True)
    number = serializers.CharField(read_only=True)
    district = serializers.CharField(read_only=True)
    city = serializers.CharField(read_only=True)
    reference = serializers.CharField(read_only=True, default="")
    is_default = serializers.BooleanField(read_only=True)


class CustomerSerializer(serializers.ModelSerializer):
    """Read serializer for the Customer resource."""

    full_name = serializers.CharField(read_only=True)
    addresses = AddressSerializer(many=True, read_only=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "phone",
            "addresses",
            "is_active",
            "last_order_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
