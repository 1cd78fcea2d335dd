"""Services Layer: orchestrates store and external collaborators around the pure core.

Invariants:
    - Services load records, call core validate_*/apply_* functions, then persist
    - Core error descriptors are raised as StoicJournalError subclasses here
    - Mutations of one user's records run under that user's lock
"""
