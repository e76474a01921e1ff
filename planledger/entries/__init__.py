"""P/L entry ledger with audit history."""
