"""Courier DRF serializers (output only)."""

from __future__ import annotations

from rest_framework import serializers

from modules.couriers.models import Courier


class CourierSerializer(serializers.ModelSerializer):
    """Read serializer for the Courier resource.

    ``document_number`` is masked down to its last four characters.
    """

    full_name = serializers.CharField(read_only=True)
    document_number = serializers.SerializerMethodField()
    location = serializers.SerializerMethodField()

    class Meta:
        model = Courier
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "phone",
            "document_type",
            "document_number",
            "birth_date",
            "vehicle_type",
            "vehicle_plate",
            "vehicle_model",
            "coverage_zones",
            "is_available",
            "is_active",
            "location",
            "rating",
            "total_deliveries",
            "current_order",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_document_number(self, obj: Courier) -> str:
        suffix = obj.document_number[-4:] if obj.document_number else "????"
        return f"***{suffix}"

    def get_location(self, obj: Courier) -> dict | None:
        if obj.last_latitude is None or obj.last_longitude is None:
            return None
        return {
            "lat": obj.last_latitude,
            "lng": obj.last_longitude,
            "updated_at": obj.location_updated_at,
        }
