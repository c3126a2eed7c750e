"""Client domain exceptions, translated to HTTP responses by the views."""

from __future__ import annotations

from shared.domain.errors import DomainError


class ClientNotFound(DomainError):
    """The requested client does not exist or has been archived."""

    code = "client_not_found"


class ContactPersonNotFound(DomainError):
    """The contact person does not exist or belongs to another client."""

    code = "contact_person_not_found"


class InactiveClient(DomainError):
    """The client is inactive and cannot receive new orders."""

    code = "inactive_client"
