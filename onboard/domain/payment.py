"""SQLAlchemy ORM models for agent payments: the rate table and the ledger."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from onboard.db.base import Base
from onboard.domain.mixins import Money, TenantMixin, TimestampMixin


class PaymentRate(Base, TenantMixin, TimestampMixin):
    """Rates for one vendor category. The four rows (A-D) form the rate table."""

    __tablename__ = "payment_rates"
    __table_args__ = (UniqueConstraint("client_id", "category", name="uq_payment_rates_category"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    category: Mapped[str] = mapped_column(String(1), nullable=False)
    visit: Mapped[Decimal] = mapped_column(Money, nullable=False)
    followup: Mapped[Decimal] = mapped_column(Money, nullable=False)
    onboarding: Mapped[Decimal] = mapped_column(Money, nullable=False)
    updated_by: Mapped[str] = mapped_column(String(100), default="system", nullable=False)


class Payment(Base, TenantMixin, TimestampMixin):
    """One ledger entry: an amount owed to an agent for one status transition."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_agent_status", "agent_id", "payment_status"),
        Index("ix_payments_agent_created", "agent_id", "created_at"),
        Index("ix_payments_status_created", "payment_status", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    agent_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    agent_name: Mapped[str] = mapped_column(String(255), default="Unknown", nullable=False)
    # No ON DELETE CASCADE: ledger rows outlive their vendor
    vendor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vendors.id"), nullable=False, index=True
    )
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Snapshots at creation time
    category: Mapped[str] = mapped_column(String(1), nullable=False, index=True)
    # "visit" | "followup" | "visit-followup" | "onboarding" | "balance"
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    visit_status: Mapped[str] = mapped_column(String(40), nullable=False)

    # Settlement: "pending" | "paid"
    payment_status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False, index=True
    )
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    remarks: Mapped[str] = mapped_column(Text, default="", nullable=False)
