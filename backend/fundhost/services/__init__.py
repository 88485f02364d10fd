"""Services Layer — ledger, settlement, membership and profile operations.

Invariants:
    - Ledger services (transactions, settlements, host settlement) flush, never commit
    - Member and invitation services commit: each call is one unit of work
"""
