"""Client DRF serializers (rendering and request parsing only)."""

from __future__ import annotations

from rest_framework import serializers

from modules.clients.models import Client, ContactPerson


class ContactPersonSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactPerson
        fields = [
            "id",
            "client",
            "name",
            "designation",
            "mobile",
            "email",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ClientSerializer(serializers.ModelSerializer):
    contact_persons = serializers.SerializerMethodField()

    class Meta:
        model = Client
        fields = [
            "id",
            "name",
            "city",
            "state",
            "pincode",
            "is_active",
            "contact_persons",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_contact_persons(self, obj: Client) -> list:
        contacts = [c for c in obj.contact_persons.all() if c.deleted_at is None]
        return ContactPersonSerializer(contacts, many=True).data
