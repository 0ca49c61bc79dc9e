from __future__ import annotations

from typing import get_args

import pytest
from pydantic import ValidationError

from zento.domains.finance.models.finance_models import (
    PAYMENT_SOURCE_TYPES,
    TRANSACTION_FLAGS,
    TRANSACTION_TYPES,
)
from zento.domains.finance.schemas.finance_schemas import (
    PaymentSourceCreate,
    PaymentSourceType,
    TransactionCreate,
    TransactionFlag,
    TransactionType,
)

pytestmark = pytest.mark.unit


def test_schema_choices_come_from_model_constants():
    assert get_args(TransactionType) == TRANSACTION_TYPES
    assert get_args(TransactionFlag) == TRANSACTION_FLAGS
    assert get_args(PaymentSourceType) == PAYMENT_SOURCE_TYPES


@pytest.mark.parametrize("source_type", PAYMENT_SOURCE_TYPES)
def test_every_model_payment_source_type_is_accepted(source_type):
    assert PaymentSourceCreate(name="Main", type=source_type.lower()).type == source_type


def test_every_model_flag_is_accepted_once():
    txn = TransactionCreate.model_validate(
        {
            "date": "2026-01-10",
            "amount_cents": -100,
            "description": "Lunch",
            "flags": [flag.lower() for flag in TRANSACTION_FLAGS] + [TRANSACTION_FLAGS[0]],
        }
    )
    assert txn.flags == list(TRANSACTION_FLAGS)


def test_unknown_transaction_type_is_rejected():
    with pytest.raises(ValidationError):
        TransactionCreate.model_validate(
            {"date": "2026-01-10", "amount_cents": 100, "description": "Pay", "type": "TRANSFER"}
        )
