"""Client and ContactPerson models.

Both are soft-deleted so sales orders (which reference them with
``PROTECT``) keep resolving after a client is archived.
"""

from __future__ import annotations

from django.core.validators import RegexValidator
from django.db import models

from modules.core.models import SoftDeleteModel

pincode_validator = RegexValidator(r"^\d{6}$", "Pincode must be exactly 6 digits.")


class Client(SoftDeleteModel):
    """A customer organisation that places sales orders."""

    name = models.CharField(max_length=255)
    city = models.CharField(max_length=255)
    state = models.CharField(max_length=255)
    pincode = models.CharField(max_length=6, validators=[pincode_validator])
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "clients"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="clients_name_idx"),
            models.Index(fields=["is_active"], name="clients_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.city})"


class ContactPerson(SoftDeleteModel):
    """Person at a client who is the point of contact for its orders.

    At least one of ``mobile`` / ``email`` is required (checked in the DTO).
    ``__str__`` never includes either, so it is safe to log.
    """

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.CASCADE,
        related_name="contact_persons",
    )
    name = models.CharField(max_length=255)
    designation = models.CharField(max_length=255, blank=True, default="")
    mobile = models.CharField(max_length=20, blank=True, default="")
    email = models.EmailField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "client_contact_persons"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["client", "name"], name="ccp_client_name_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} @ {self.client_id}"
