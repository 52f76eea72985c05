"""Services package — all business logic lives here, never in routers.

Files:
  visit_status.py        — visit-status state machine (pure)
  payment_calculator.py  — incremental agent payment per transition (pure)
  rate_table.py          — payment rate table get-or-create / partial update
  payment_ledger.py      — ledger entries, vendor totals, settlement, reports
  payment_status.py      — admin payment-status entry point
  followup.py            — agent outcome reports and follow-up lists
  notification.py        — admin notifications (best effort)
  vendor.py              — vendor CRUD and the edit-request flow

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
