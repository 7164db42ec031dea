"""Treasury ledger and its audit tool."""
