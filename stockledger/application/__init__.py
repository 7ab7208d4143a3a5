"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing the ledger unit of work for dependency injection

Use cases are the only entry point for API handlers.
"""

from stockledger.application.services import (
    LedgerContext,
    LedgerService,
    get_ledger_service,
    reset_ledger_service,
)

__all__ = [
    "LedgerContext",
    "LedgerService",
    "get_ledger_service",
    "reset_ledger_service",
]
