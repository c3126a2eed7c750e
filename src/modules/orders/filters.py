import django_filters

from modules.orders.constants import Company, OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    company = django_filters.ChoiceFilter(choices=Company.choices)
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    client = django_filters.UUIDFilter(field_name="client_id")
    dispatched_by = django_filters.NumberFilter(field_name="dispatched_by_id")
    so_no = django_filters.CharFilter(lookup_expr="iexact")
    order_no = django_filters.CharFilter(lookup_expr="iexact")
    date_from = django_filters.DateFilter(field_name="so_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="so_date", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "company",
            "status",
            "client",
            "dispatched_by",
            "so_no",
            "order_no",
            "date_from",
            "date_to",
        ]
