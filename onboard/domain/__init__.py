"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  vendor.py        — Vendor aggregate and its append-only follow-up history
  payment.py       — Per-category payment rates and the payment ledger
  notification.py  — Admin notifications about agent activity
  audit.py         — Immutable audit trail (never updated or deleted)
  mixins.py        — Shared TimestampMixin, TenantMixin, Money column type
"""

from onboard.domain.audit import AuditTrail
from onboard.domain.notification import Notification
from onboard.domain.payment import Payment, PaymentRate
from onboard.domain.vendor import FollowUpHistory, Vendor

__all__ = [
    "AuditTrail",
    "FollowUpHistory",
    "Notification",
    "Payment",
    "PaymentRate",
    "Vendor",
]
