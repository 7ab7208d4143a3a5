"""
Domain exceptions for the stock ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Catalog Exceptions
class CatalogError(LedgerError):
    """Base exception for catalog operations."""

    pass


class ProductNotFoundError(CatalogError):
    """Product not found in the catalog."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class ProductHasHistoryError(CatalogError):
    """Product cannot be deleted because it has lots or movements."""

    def __init__(self, product_id: str, lots: int, movements: int):
        super().__init__(
            f"Product {product_id} has history and can only be deactivated",
            code="PRODUCT_HAS_HISTORY",
            details={"product_id": product_id, "lots": lots, "movements": movements},
        )


class PendingNotFoundError(CatalogError):
    """Pending reconciliation entry not found."""

    def __init__(self, pending_id: str):
        super().__init__(
            f"Pending reconciliation not found: {pending_id}",
            code="PENDING_NOT_FOUND",
            details={"pending_id": pending_id},
        )


# Stock Exceptions
class StockError(LedgerError):
    """Base exception for stock movements."""

    pass


class InvalidQuantityError(StockError):
    """Quantity is zero, negative, or not a finite number."""

    def __init__(self, quantity: Any):
        super().__init__(
            f"Invalid quantity: {quantity}",
            code="INVALID_QUANTITY",
            details={"quantity": str(quantity)},
        )


class InvalidFactorError(StockError):
    """Presentation conversion factor is zero, negative, or not finite."""

    def __init__(self, presentation: str, factor: Any):
        super().__init__(
            f"Invalid conversion factor for '{presentation}': {factor}",
            code="INVALID_FACTOR",
            details={"presentation": presentation, "factor": str(factor)},
        )


class InsufficientStockError(StockError):
    """Requested quantity exceeds available stock."""

    def __init__(self, product_id: str, requested: float, available: float):
        super().__init__(
            f"Insufficient stock for {product_id}: requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


# Reversal Exceptions
class RevertError(LedgerError):
    """Base exception for import/sale reversal."""

    pass


class NoRecentImportError(RevertError):
    """There is no recorded purchase import to revert."""

    def __init__(self, reason: str = "No recent purchase import to revert"):
        super().__init__(
            reason,
            code="NO_RECENT_IMPORT",
            details={"reason": reason},
        )


class NothingToRevertError(RevertError):
    """No movements found for the given document reference."""

    def __init__(self, document_reference: str):
        super().__init__(
            f"No exit movements found for document: {document_reference}",
            code="NOTHING_TO_REVERT",
            details={"document_reference": document_reference},
        )


class LaterMovementsExistError(RevertError):
    """Reversal blocked because later movements depend on the batch."""

    def __init__(self, product_ids: list[str]):
        super().__init__(
            "Cannot revert: later movements exist for one or more products",
            code="LATER_MOVEMENTS_EXIST",
            details={"product_ids": product_ids},
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class SnapshotError(StorageError):
    """Snapshot could not be read or written."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Snapshot error during {operation}: {error}",
            code="SNAPSHOT_ERROR",
            details={"operation": operation, "error": error},
        )


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value else None,
            },
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")
