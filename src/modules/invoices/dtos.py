"""Invoice DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IssueInvoiceDTO(BaseModel):
    """Direct issue request; ``billed_by`` defaults to the caller."""

    model_config = ConfigDict(frozen=True)

    order: UUID
    invoice_number: str = Field(max_length=255)
    invoice_date: date
    billed_by: Optional[int] = None

    @field_validator("invoice_number")
    @classmethod
    def invoice_number_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Invoice number must not be blank.")
        return v
