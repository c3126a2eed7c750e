"""Sequence DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReservedNumber(BaseModel):
    """One reservation: raw parts plus the formatted ``so_no``."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    number: int
    postfix: str
    so_no: str


class CounterDTO(BaseModel):
    """Administrative create/replace payload for a counter row."""

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(min_length=1, max_length=32)
    number: int = Field(ge=0)
    postfix: str = Field(min_length=1, max_length=16)

    @field_validator("prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Prefix must not be blank.")
        return v


class UpdateCounterDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    prefix: Optional[str] = Field(default=None, min_length=1, max_length=32)
    number: Optional[int] = Field(default=None, ge=0)
    postfix: Optional[str] = Field(default=None, min_length=1, max_length=16)

    @field_validator("prefix")
    @classmethod
    def normalize_prefix(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else v
