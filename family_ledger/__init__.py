"""Family Ledger: shared household finance tracking."""
