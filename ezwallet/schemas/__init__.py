"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input)
    - Scalar fields are typed and checked here; list rules shared by several
      operations (member emails, category labels) are checked in core/

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
