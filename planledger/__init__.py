"""Planning ledger: scenario-versioned P/L planning tree."""

__version__ = "0.1.0"
