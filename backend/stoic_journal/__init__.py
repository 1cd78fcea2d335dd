"""Stoic Journal: 30-day stoic challenge tracks with one-time track purchases.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
