"""
Core ledger services.

Layer-pure services that depend only on:
- stockledger/core/entities/*
- stockledger/core/interfaces/*
- stockledger/core/exceptions.py

NO infrastructure imports. The catalog store is passed explicitly to the
services that use it.
"""

from stockledger.core.services.catalog_store import (
    CatalogImportResult,
    CatalogStore,
    ExitResult,
)
from stockledger.core.services.costing import LotAllocation, select_lots, weighted_average
from stockledger.core.services.import_orchestrator import (
    ImportOrchestrator,
    ImportResult,
    LineAction,
    LineConfirmation,
    RevertResult,
)
from stockledger.core.services.kardex import build_ledger, export_catalog_csv
from stockledger.core.services.reconciliation import (
    MatchDecision,
    MatchOutcome,
    MatchReason,
    ReconciliationEngine,
    SaleResult,
)
from stockledger.core.services.text_similarity import KeywordSimilarityScorer, similarity

__all__ = [
    # Catalog
    "CatalogStore",
    "CatalogImportResult",
    "ExitResult",
    # Costing
    "LotAllocation",
    "select_lots",
    "weighted_average",
    # Reconciliation
    "ReconciliationEngine",
    "MatchDecision",
    "MatchOutcome",
    "MatchReason",
    "SaleResult",
    "KeywordSimilarityScorer",
    "similarity",
    # Import / revert
    "ImportOrchestrator",
    "ImportResult",
    "LineAction",
    "LineConfirmation",
    "RevertResult",
    # Reporting
    "build_ledger",
    "export_catalog_csv",
]
