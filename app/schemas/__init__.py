"""Pydantic schemas package.

Folder intent:
  common.py             — CamelModel base, response envelopes, HealthResponse
  car.py                — Cars, validity checks, claims and car history
  policy_expiration.py  — Expiration records and reconciliation pass summaries
"""
