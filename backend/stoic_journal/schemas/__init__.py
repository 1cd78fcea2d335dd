"""Pydantic Schemas: request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (request bodies, seeded content)
    - Request bodies accept the camelCase keys the web client sends

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
