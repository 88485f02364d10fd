"""fundhost — fiscal hosting ledger, memberships and profile pages.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
