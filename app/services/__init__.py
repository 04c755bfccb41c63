"""Services package — all business logic lives here, never in routers.

Files:
  car.py                 — Car listing, insurance validity, claims, history
  policy_expiration.py   — One reconciliation pass of the policy expiration monitor
  expiration_monitor.py  — Background loop running that pass every N minutes

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
