"""Order DRF serializers for API output.

Request payloads are parsed by the Pydantic DTOs in ``dtos.py``; these
serializers only render.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderStatusHistory


class StatusHistorySerializer(serializers.ModelSerializer):
    user_username = serializers.CharField(
        source="user.get_username", read_only=True, default=None
    )

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "user",
            "user_username",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no history)."""

    client_name = serializers.CharField(source="client.name", read_only=True)
    dispatched_by_username = serializers.CharField(
        source="dispatched_by.get_username", read_only=True
    )
    invoice_number = serializers.CharField(
        source="invoice.invoice_number", read_only=True, default=None
    )

    class Meta:
        model = Order
        fields = [
            "id",
            "company",
            "so_no",
            "order_no",
            "so_date",
            "order_date",
            "status",
            "client",
            "client_name",
            "dispatched_by",
            "dispatched_by_username",
            "dispatched_date",
            "invoice",
            "invoice_number",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    """Full order with contact person, people and status history."""

    client_contact_person_name = serializers.CharField(
        source="client_contact_person.name", read_only=True
    )
    initiated_by_username = serializers.CharField(
        source="initiated_by.get_username", read_only=True
    )
    checked_by_username = serializers.CharField(
        source="checked_by.get_username", read_only=True
    )
    allowed_next_statuses = serializers.ListField(
        child=serializers.CharField(), read_only=True
    )
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + [
            "client_contact_person",
            "client_contact_person_name",
            "initiated_by",
            "initiated_by_username",
            "checked_by",
            "checked_by_username",
            "drive_link",
            "dispatch_remarks",
            "allowed_next_statuses",
            "updated_at",
            "status_history",
        ]
        read_only_fields = fields


class DispatcherSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    username = serializers.CharField()
    full_name = serializers.CharField()
    open_orders = serializers.IntegerField()
