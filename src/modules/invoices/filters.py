import django_filters

from modules.invoices.models import Invoice


class InvoiceFilter(django_filters.FilterSet):
    invoice_number = django_filters.CharFilter(lookup_expr="iexact")
    order = django_filters.UUIDFilter(field_name="order_id")
    date_from = django_filters.DateFilter(field_name="invoice_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="invoice_date", lookup_expr="lte")

    class Meta:
        model = Invoice
        fields = ["invoice_number", "order", "date_from", "date_to"]
