"""v1 router package — all /api/v1/* endpoints live here.

Files:
  cars.py                — Cars, insurance validity, claims, history
  policy_expirations.py  — Expiration log and on-demand reconciliation pass

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
