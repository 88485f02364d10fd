"""GraphQL API — Strawberry schema over the member and ledger services."""
