"""
Unit conversion between packaging presentations and base units.

An unknown presentation never blocks a document: it converts with a safe
factor of 1 and is queued on the product's pending-presentation list so a
user can set the real factor later.
"""

import math
import re
from dataclasses import dataclass

from stockledger.config import get_logger
from stockledger.core.entities.product import DEFAULT_BASE_UNIT, Presentation, Product

logger = get_logger(__name__)

# First match wins
PRESENTATION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("DOZEN", re.compile(r"\bDOZEN\b|\bDOCENA\b|\b12\s*U\b")),
    ("BOX", re.compile(r"\bBOX\b|\bCAJA\b|\bCJ\b")),
    ("SACK", re.compile(r"\bSACK\b|\bSACO\b|\bBULTO\b")),
    ("PACKAGE", re.compile(r"\bPACKAGE\b|\bPACK\b|\bPAQUETE\b|\bPQT\b")),
    ("BAG", re.compile(r"\bBAG\b|\bBOLSA\b")),
    ("BOTTLE", re.compile(r"\bBOTTLE\b|\bBOTELLA\b")),
)


@dataclass(frozen=True)
class FactorResolution:
    """Conversion factor for a presentation and whether it is still unresolved."""

    factor: float
    is_pending: bool


def detect_presentation(description: str, base_unit: str = DEFAULT_BASE_UNIT) -> str:
    """Detect the packaging word in a description, defaulting to the base unit."""
    text = (description or "").upper()
    if not text:
        return base_unit
    for name, pattern in PRESENTATION_PATTERNS:
        if pattern.search(text):
            return name
    return base_unit


def _valid_factor(factor: float) -> bool:
    try:
        value = float(factor)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def resolve_factor(product: Product, presentation: str) -> FactorResolution:
    """
    Look up how many base units one `presentation` holds.

    Unknown presentations are recorded as pending and resolve to 1.
    """
    name = (presentation or "").strip().upper() or product.base_unit
    for existing in product.presentations:
        if existing.name.upper() == name and existing.factor > 0:
            return FactorResolution(factor=existing.factor, is_pending=False)

    if name != product.base_unit and name not in product.pending_presentations:
        product.pending_presentations.append(name)
        logger.info(
            "presentation_pending",
            product_id=product.id,
            presentation=name,
        )
    return FactorResolution(factor=1.0, is_pending=True)


def set_presentation_factor(product: Product, presentation: str, factor: float) -> bool:
    """
    Upsert a presentation factor and clear it from the pending list.

    Invalid input (blank name, factor not finite or <= 0, or a factor other
    than 1 for the base unit) leaves the product untouched and returns False.
    """
    name = (presentation or "").strip().upper()
    base_mismatch = name == product.base_unit and _valid_factor(factor) and float(factor) != 1.0
    if not name or not _valid_factor(factor) or base_mismatch:
        logger.warning(
            "presentation_factor_ignored",
            product_id=product.id,
            presentation=name,
            factor=factor,
        )
        return False

    value = float(factor)
    for existing in product.presentations:
        if existing.name.upper() == name:
            existing.factor = value
            break
    else:
        product.presentations.append(Presentation(name=name, factor=value))

    product.pending_presentations = [
        p for p in product.pending_presentations if p.upper() != name
    ]
    logger.info(
        "presentation_factor_set",
        product_id=product.id,
        presentation=name,
        factor=value,
    )
    return True


def set_base_unit(product: Product, unit: str) -> None:
    """Change the base unit, keeping its factor-1 presentation."""
    name = (unit or "").strip().upper() or DEFAULT_BASE_UNIT
    product.base_unit = name
    for existing in product.presentations:
        if existing.name == name:
            existing.factor = 1.0
            break
    else:
        product.presentations.append(Presentation(name=name, factor=1.0))
    product.pending_presentations = [p for p in product.pending_presentations if p != name]


def to_base_unit_cost(presentation_price: float, factor: float) -> float:
    """Cost of one base unit given the price of one presentation."""
    price = float(presentation_price or 0)
    if price <= 0:
        return 0.0
    if not _valid_factor(factor):
        return price
    return price / float(factor)
