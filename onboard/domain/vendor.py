"""SQLAlchemy ORM models for Vendors and their follow-up history.

A vendor is the aggregate root of the onboarding funnel:
  - business details captured by the registering agent
  - review status set by admins (pending | publish | reject)
  - ownership (creator and optional assigned agent)
  - edit-request flags (agents may only edit after admin approval)
  - payment tracking: category, visit status, follow-up dates, running totals
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from onboard.db.base import Base
from onboard.domain.mixins import Money, TenantMixin, TimestampMixin, utcnow


class Vendor(Base, TenantMixin, TimestampMixin):
    __tablename__ = "vendors"
    __table_args__ = (
        Index("ix_vendors_owner_visit_status", "created_by_id", "visit_status"),
        Index("ix_vendors_visit_status_followup", "visit_status", "follow_up_date"),
        Index("ix_vendors_category_completed", "payment_category", "payment_completed"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    restaurant_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mobile_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    full_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    vendor_type: Mapped[str] = mapped_column(String(50), default="restaurant", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # "pending" | "publish" | "reject"
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)

    # Who registered / works this vendor
    created_by_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    created_by_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_by_role: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    assigned_agent_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    assigned_agent_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Edit requests
    edit_requested: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    edit_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    edit_request_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    edit_approval_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    edit_remark: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Payment tracking
    payment_category: Mapped[Optional[str]] = mapped_column(String(1), index=True, nullable=True)
    visit_status: Mapped[str] = mapped_column(
        String(40), default="pending-visit", nullable=False, index=True
    )
    follow_up_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), index=True, nullable=True
    )
    second_follow_up_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Last outcome reported by the agent
    last_visited_on: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_outcome: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    last_remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    next_follow_up_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Running totals. total_payment_paid is the amount attributed (invoiced)
    # to the agent so far, not the amount settled; settlement lives on Payment.
    total_payment_due: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    total_payment_paid: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    payment_completed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )

    @property
    def owner_agent_id(self) -> str:
        """Agent credited for this vendor's payments."""
        return self.assigned_agent_id or self.created_by_id

    @property
    def owner_agent_name(self) -> Optional[str]:
        if self.assigned_agent_id:
            return self.assigned_agent_name
        return self.created_by_name

    def is_owned_by(self, actor_id: str) -> bool:
        return actor_id in (self.created_by_id, self.assigned_agent_id)


class FollowUpHistory(Base, TenantMixin):
    """One row per visit-status transition. Rows are never updated or deleted."""

    __tablename__ = "vendor_followup_history"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vendor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vendors.id"), nullable=False, index=True
    )
    # 1-based position within the vendor's log
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    outcome: Mapped[str] = mapped_column(String(40), nullable=False)
    visit_status: Mapped[str] = mapped_column(String(40), nullable=False)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_by: Mapped[str] = mapped_column(String(36), nullable=False)
    updated_by_role: Mapped[str] = mapped_column(String(20), nullable=False)
