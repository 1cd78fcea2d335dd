"""Infrastructure Layer: external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/repository_protocols.py contracts
    - All external failures mapped to StoicJournalError subclasses
"""
