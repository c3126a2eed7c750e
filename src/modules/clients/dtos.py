"""Client DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

import re
from typing import List, Optional, Self

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator


def _check_pincode(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = str(value).strip()
    if not re.fullmatch(r"\d{6}", value):
        raise ValueError("Pincode must be exactly 6 digits.")
    return value


class ContactPersonDTO(BaseModel):
    """Input for one contact person; needs a mobile or an e-mail."""

    model_config = ConfigDict(frozen=True)

    name: str
    designation: str = ""
    mobile: str = ""
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be blank.")
        return v.strip()

    @model_validator(mode="after")
    def mobile_or_email(self) -> Self:
        if not self.mobile and not self.email:
            raise ValueError("At least mobile or email is required.")
        return self


class CreateClientDTO(BaseModel):
    """Input for client creation, optionally with its first contacts."""

    model_config = ConfigDict(frozen=True)

    name: str
    city: str
    state: str
    pincode: str
    contact_persons: List[ContactPersonDTO] = []

    @field_validator("pincode", mode="before")
    @classmethod
    def validate_pincode(cls, v):
        return _check_pincode(v)


class UpdateClientDTO(BaseModel):
    """Partial update; ``None`` means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("pincode", mode="before")
    @classmethod
    def validate_pincode(cls, v):
        return _check_pincode(v)
