"""Campus Points ledger service."""
