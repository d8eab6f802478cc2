"""API Schemas — Pydantic models for request/response bodies at the HTTP boundary.

Invariants:
    - Schemas shape data only; business validation stays in core/validate_inputs.py
"""
