"""Tests for the ledger logging processors and document context."""

import structlog

from stockledger.config import document_context
from stockledger.config.logging import add_service_context, round_floats


class TestProcessors:
    def test_round_floats(self):
        event = round_floats(None, "info", {"event": "x", "cost": 0.1 + 0.2, "count": 3})
        assert event == {"event": "x", "cost": 0.3, "count": 3}

    def test_service_context(self):
        event = add_service_context(None, "info", {"event": "x"})
        assert event["app"] == "Stock Ledger"
        assert event["storage"] in ("sqlite", "json")


class TestDocumentContext:
    def test_binds_and_clears_reference(self):
        with document_context("DOC-1", "purchase"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["document"] == "DOC-1"
            assert bound["document_kind"] == "purchase"
        assert "document" not in structlog.contextvars.get_contextvars()
