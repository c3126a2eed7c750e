from rest_framework import serializers

from modules.invoices.models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    order_no = serializers.CharField(
        source="order.order_no", read_only=True, default=None
    )
    so_no = serializers.CharField(source="order.so_no", read_only=True, default=None)
    billed_by_username = serializers.CharField(
        source="billed_by.get_username", read_only=True
    )

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "invoice_date",
            "order",
            "order_no",
            "so_no",
            "billed_by",
            "billed_by_username",
            "created_at",
        ]
        read_only_fields = fields
