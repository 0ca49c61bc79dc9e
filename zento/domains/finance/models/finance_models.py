"""Finance models: categories, transactions and payment sources."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from zento.core.users.models import TimestampMixin
from zento.extensions import db

TRANSACTION_TYPES = ("EXPENSE", "INCOME")
TRANSACTION_FLAGS = ("WORTH_IT", "UNEXPECTED", "REVIEW_LATER")
PAYMENT_SOURCE_TYPES = ("BANK", "CARD", "CASH")


class Category(db.Model, TimestampMixin):
    __tablename__ = "finance_category"
    __table_args__ = (
        # Case-sensitive at rest; merge compares names case-insensitively.
        db.UniqueConstraint("user_id", "name", name="uq_finance_category_user_name"),
        db.Index("ix_finance_category_user_sort", "user_id", "sort_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(db.String(40), nullable=False)
    sort_order: Mapped[int] = mapped_column(default=0, nullable=False)


class PaymentSource(db.Model, TimestampMixin):
    __tablename__ = "finance_payment_source"
    __table_args__ = (db.UniqueConstraint("user_id", "name", name="uq_finance_payment_source_user_name"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(db.String(60), nullable=False)
    type: Mapped[str] = mapped_column(db.String(8), nullable=False, default="BANK")


class Transaction(db.Model, TimestampMixin):
    __tablename__ = "finance_transaction"
    __table_args__ = (
        db.Index("ix_finance_transaction_user_date", "user_id", "occurred_on"),
        db.Index("ix_finance_transaction_user_category", "user_id", "category_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    occurred_on: Mapped[date] = mapped_column(db.Date, nullable=False)
    # Always positive; direction lives in ``type``.
    amount_cents: Mapped[int] = mapped_column(nullable=False)
    type: Mapped[str] = mapped_column(db.String(8), nullable=False, default="EXPENSE")
    description: Mapped[str] = mapped_column(db.String(255), nullable=False)
    notes: Mapped[str | None] = mapped_column(db.Text)
    flags: Mapped[list] = mapped_column(db.JSON, nullable=False, default=list)
    category_id: Mapped[int | None] = mapped_column(
        db.ForeignKey("finance_category.id", ondelete="SET NULL"), nullable=True
    )
    payment_source_id: Mapped[int | None] = mapped_column(
        db.ForeignKey("finance_payment_source.id", ondelete="SET NULL"), nullable=True, index=True
    )

    category: Mapped[Category | None] = relationship("Category")
    payment_source: Mapped[PaymentSource | None] = relationship("PaymentSource")

    @property
    def signed_amount_cents(self) -> int:
        return -self.amount_cents if self.type == "EXPENSE" else self.amount_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.occurred_on.isoformat(),
            "amount_cents": self.amount_cents,
            "signed_amount_cents": self.signed_amount_cents,
            "type": self.type,
            "description": self.description,
            "notes": self.notes,
            "flags": list(self.flags or []),
            "category_id": self.category_id,
            "payment_source_id": self.payment_source_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


__all__ = [
    "Category",
    "PAYMENT_SOURCE_TYPES",
    "PaymentSource",
    "TRANSACTION_FLAGS",
    "TRANSACTION_TYPES",
    "Transaction",
]
