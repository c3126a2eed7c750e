import django_filters

from modules.clients.models import Client, ContactPerson


class ClientFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    city = django_filters.CharFilter(field_name="city", lookup_expr="iexact")
    state = django_filters.CharFilter(field_name="state", lookup_expr="iexact")
    active = django_filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = Client
        fields = ["name", "city", "state", "active"]


class ContactPersonFilter(django_filters.FilterSet):
    client = django_filters.UUIDFilter(field_name="client_id")
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = ContactPerson
        fields = ["client", "name"]
