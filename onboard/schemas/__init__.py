"""Pydantic schemas package.

Folder intent:
  common.py        — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  vendor.py        — Vendor registration, admin/agent edits, vendor and history output
  payment.py       — Rate table, payment-status updates, ledger entries and reports
  followup.py      — Agent outcome reports and follow-up listings
  notification.py  — Admin notification output
"""
