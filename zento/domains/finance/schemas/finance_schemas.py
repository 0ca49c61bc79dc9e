"""Pydantic schemas for finance domain."""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zento.domains.finance.models.finance_models import (
    PAYMENT_SOURCE_TYPES,
    TRANSACTION_FLAGS,
    TRANSACTION_TYPES,
)

MAX_AMOUNT_CENTS = 1_000_000_000
MAX_SORT_ORDER = 100_000

# Subscripting Literal with a tuple spreads its members.
TransactionType = Literal[TRANSACTION_TYPES]
TransactionFlag = Literal[TRANSACTION_FLAGS]
PaymentSourceType = Literal[PAYMENT_SOURCE_TYPES]


def _upper(value):
    if isinstance(value, str):
        return value.strip().upper()
    return value


def _strip(value):
    if isinstance(value, str):
        return value.strip()
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _dedupe_flags(value):
    if value is None:
        return []
    if isinstance(value, list):
        seen: List[str] = []
        for raw in value:
            flag = _upper(raw)
            if flag not in seen:
                seen.append(flag)
        return seen
    return value


def _check_amount(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    if value == 0:
        raise ValueError("amount_cents cannot be 0")
    if abs(value) > MAX_AMOUNT_CENTS:
        raise ValueError("amount_cents is out of bounds")
    return value


# ==================== Categories ====================


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=40)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=40)
    sort_order: Optional[int] = Field(default=None, ge=0, le=MAX_SORT_ORDER)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)


class CategoryReorder(BaseModel):
    """Bulk reorder: ids in their new display order."""

    order: List[int] = Field(min_length=1)


class CategoryDelete(BaseModel):
    reassign_to_category_id: Optional[int] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


# ==================== Transactions ====================


class TransactionCreate(BaseModel):
    """Signed ``amount_cents`` is accepted; without an explicit type a negative amount is an expense."""

    model_config = ConfigDict(populate_by_name=True)

    occurred_on: date = Field(alias="date")
    amount_cents: int
    type: Optional[TransactionType] = None
    description: str = Field(min_length=1, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=2000)
    flags: List[TransactionFlag] = Field(default_factory=list)
    category_id: Optional[int] = None
    payment_source_id: Optional[int] = None

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, v):
        return _upper(v)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v):
        return _strip(v)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes(cls, v):
        return _blank_to_none(v)

    @field_validator("flags", mode="before")
    @classmethod
    def normalize_flags(cls, v):
        return _dedupe_flags(v)

    @field_validator("amount_cents")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        return _check_amount(v)


class TransactionUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    model_config = ConfigDict(populate_by_name=True)

    occurred_on: Optional[date] = Field(default=None, alias="date")
    amount_cents: Optional[int] = None
    type: Optional[TransactionType] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=2000)
    flags: Optional[List[TransactionFlag]] = None
    category_id: Optional[int] = None
    payment_source_id: Optional[int] = None

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, v):
        return _upper(v)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v):
        return _strip(v)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes(cls, v):
        return _blank_to_none(v)

    @field_validator("flags", mode="before")
    @classmethod
    def normalize_flags(cls, v):
        # null clears the flags
        return _dedupe_flags(v)

    @field_validator("amount_cents")
    @classmethod
    def validate_amount(cls, v: Optional[int]) -> Optional[int]:
        return _check_amount(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class TransactionQuery(BaseModel):
    month: Optional[str] = Field(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    q: Optional[str] = Field(default=None, max_length=100)
    category_id: Optional[str] = None


# ==================== Payment sources ====================


class PaymentSourceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=60)
    type: PaymentSourceType = "BANK"

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, v):
        return _upper(v)


class PaymentSourceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    type: Optional[PaymentSourceType] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, v):
        return _upper(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PaymentSourceResponse(BaseModel):
    id: int
    name: str
    type: str

    model_config = ConfigDict(from_attributes=True)
