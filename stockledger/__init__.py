"""Stock Ledger - inventory ledger and purchase/sale reconciliation engine."""

__version__ = "0.1.0"
