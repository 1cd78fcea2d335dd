"""Client Layer: async API client and post-payment orchestration for front ends.

Invariants:
    - Nothing here imports from api/ or services/: the client speaks HTTP only
    - Payment ambiguity never raises out of the orchestrator; it yields notices
"""
