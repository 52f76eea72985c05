"""v1 router package — all /api/v1/* endpoints live here.

Files:
  vendors.py        — vendor registration, admin CRUD, edit-request review
  payments.py       — admin: vendor payment status, rate table, ledger, settlement
  agent.py          — agent self-service: follow-ups, own vendors, earnings
  notifications.py  — admin notifications

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to onboard/services/.
"""
