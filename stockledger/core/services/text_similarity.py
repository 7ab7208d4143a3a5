"""
Text similarity utilities for product descriptions.

Normalizes free-text descriptions, extracts keyword sets, scores how
alike two descriptions are, and guesses a category from keywords.
Pure functions; uses only the standard library.
"""

import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass

from stockledger.core.entities.product import DEFAULT_CATEGORY, Product
from stockledger.core.interfaces.similarity import ISimilarityScorer

# Words ignored when extracting keywords
STOP_WORDS = frozenset(
    {
        # Spanish
        "de", "la", "el", "en", "para", "con", "por", "y", "o", "del", "los",
        "las", "un", "una", "unos", "unas", "al", "lo", "le", "les", "mi", "su",
        "nuestro", "a", "ante", "bajo", "cabe", "contra", "desde", "durante",
        "entre", "hacia", "hasta", "mediante", "segun", "sin", "so", "sobre",
        "tras", "vs",
        # English
        "the", "and", "or", "for", "to", "in", "on", "at", "of", "with", "by",
        "from", "a", "an",
    }
)

# Weights of the blended score
JACCARD_WEIGHT = 0.6
LENGTH_WEIGHT = 0.2
INITIALS_WEIGHT = 0.2


@dataclass(frozen=True)
class CategoryRule:
    """A category and the keywords that identify it."""

    name: str
    keywords: tuple[str, ...]


# Order is significant: the first matching category wins.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        "Electrical",
        ("electrical", "outlet", "adapter", "polarized", "switch", "socket", "plug",
         "cable", "toma", "adaptador", "polarizado", "interruptor", "enchufe"),
    ),
    CategoryRule(
        "Kitchen",
        ("spatula", "bowl", "chef", "spoon", "knife", "skillet", "pot", "tray",
         "espatula", "cuchara", "cuchillo", "sarten", "olla", "bandeja"),
    ),
    CategoryRule(
        "Cleaning",
        ("cleaner", "mop", "broom", "detergent", "soap", "disinfectant",
         "limpiador", "trapeador", "escoba", "detergente", "jabon", "desinfectante"),
    ),
    CategoryRule(
        "Tools",
        ("wrench", "screwdriver", "pliers", "drill", "saw", "hammer",
         "llave", "destornillador", "pinza", "taladro", "sierra", "martillo", "alicate"),
    ),
    CategoryRule(
        "Hardware",
        ("screw", "nut", "washer", "nail", "bolt", "anchor",
         "tornillo", "tuerca", "arandela", "clavo", "perno", "ancla", "tarugo"),
    ),
    CategoryRule(
        "Paint",
        ("paint", "brush", "roller", "sealer", "primer", "thinner",
         "pintura", "brocha", "rodillo", "sellador", "imprimacion"),
    ),
    CategoryRule(
        "Plumbing",
        ("pipe", "elbow", "tee", "valve", "faucet", "hose", "fitting",
         "tubo", "codo", "reduccion", "valvula", "grifo", "manguera", "conexion"),
    ),
    CategoryRule(
        "Lighting",
        ("bulb", "lamp", "led", "light", "reflector", "dichroic",
         "foco", "lampara", "bombillo", "luz", "reflectores", "dicroica"),
    ),
    CategoryRule(
        "Office",
        ("paper", "notebook", "pen", "folder", "binder", "chair", "desk",
         "papel", "cuaderno", "lapicero", "boligrafo", "carpeta", "archivador",
         "silla", "escritorio"),
    ),
    CategoryRule(
        "Electronics",
        ("battery", "charger", "usb", "connector", "headphone",
         "bateria", "cargador", "conector", "auricular"),
    ),
    CategoryRule(
        "Construction",
        ("cement", "sand", "block", "brick", "rebar", "mesh", "mortar",
         "cemento", "arena", "bloque", "ladrillo", "varilla", "malla", "mezcla"),
    ),
    CategoryRule(DEFAULT_CATEGORY, ()),
)


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str) -> str:
    """Lowercase, strip accents, drop non-alphanumerics, collapse whitespace."""
    result = _strip_accents((text or "").lower())
    result = re.sub(r"[^a-z0-9\s]", " ", result)
    return re.sub(r"\s+", " ", result).strip()


def keywords(text: str) -> set[str]:
    """Extract the keyword set of a description."""
    return {
        word
        for word in normalize(text).split(" ")
        if len(word) > 2 and word not in STOP_WORDS and not word.isdigit()
    }


def ordered_keywords(text: str) -> list[str]:
    """Keywords in first-seen order (for storing on products)."""
    seen: list[str] = []
    kept = keywords(text)
    for word in normalize(text).split(" "):
        if word in kept and word not in seen:
            seen.append(word)
    return seen


def jaccard(a: str, b: str) -> float:
    """Jaccard index over keyword sets."""
    words_a = keywords(a)
    words_b = keywords(b)
    if not words_a and not words_b:
        return 1.0
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def _length_ratio(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1 - abs(len(a) - len(b)) / longest


def _leading_initials(a: str, b: str) -> float:
    tokens_a = a.lower().split()
    tokens_b = b.lower().split()
    if not tokens_a and not tokens_b:
        return 1.0
    aligned = min(len(tokens_a), len(tokens_b))
    if aligned == 0:
        return 0.0
    same = sum(1 for i in range(aligned) if tokens_a[i][0] == tokens_b[i][0])
    return same / aligned


def similarity(a: str, b: str) -> float:
    """
    Blended similarity between two descriptions.

    0.6 * keyword Jaccard + 0.2 * length ratio + 0.2 * matching initials
    of the aligned leading tokens. Deterministic; only the Jaccard term is
    guaranteed commutative.
    """
    a = a or ""
    b = b or ""
    return (
        JACCARD_WEIGHT * jaccard(a, b)
        + LENGTH_WEIGHT * _length_ratio(a, b)
        + INITIALS_WEIGHT * _leading_initials(a, b)
    )


class KeywordSimilarityScorer(ISimilarityScorer):
    """Default scorer backed by `similarity`."""

    def score(self, a: str, b: str) -> float:
        return similarity(a, b)


def guess_category(text: str) -> str:
    """
    Guess a category from a description.

    First pass: any category keyword contained in the text. Second pass:
    partial overlap between extracted keywords and category keywords.
    Falls back to the default category.
    """
    lowered = _strip_accents((text or "").lower())
    for rule in CATEGORY_RULES:
        if any(kw in lowered for kw in rule.keywords):
            return rule.name

    words = keywords(text)
    for rule in CATEGORY_RULES:
        for kw in rule.keywords:
            if any(kw in word or word in kw for word in words):
                return rule.name

    return DEFAULT_CATEGORY


@dataclass
class SimilarityHit:
    """A product scoring above the threshold for a description."""

    product: Product
    score: float
    matched_text: str  # description or variant that scored best


def rank_similar(
    text: str,
    products: Iterable[Product],
    threshold: float = 0.7,
    scorer: ISimilarityScorer | None = None,
) -> list[SimilarityHit]:
    """
    Rank products by similarity to a description.

    Each product scores the maximum over its description and recorded
    variants. Only scores >= threshold are returned, best first.
    """
    scorer = scorer or KeywordSimilarityScorer()
    hits: list[SimilarityHit] = []

    for product in products:
        best_score = scorer.score(text, product.description)
        best_text = product.description
        for variant in product.variants:
            variant_score = scorer.score(text, variant)
            if variant_score > best_score:
                best_score = variant_score
                best_text = variant

        if best_score >= threshold:
            hits.append(SimilarityHit(product=product, score=best_score, matched_text=best_text))

    hits.sort(key=lambda h: h.score, reverse=True)
    return hits


def normalize_description_key(text: str) -> str:
    """Key used by the remembered description -> product mapping."""
    result = re.sub(r"\s+", " ", (text or "").strip())
    result = re.sub(r"[^a-zA-Z0-9\s\-/]", "", result)
    return result.upper()


def generate_product_code(category: str, existing: Iterable[str]) -> str:
    """Category prefix plus the first free zero-padded counter (e.g. ELE-001)."""
    prefix = re.sub(r"[^A-Z]", "", _strip_accents(category or "")[:3].upper())
    taken = {code for code in existing if code}
    counter = 1
    while True:
        code = f"{prefix}-{counter:03d}"
        if code not in taken:
            return code
        counter += 1


def extract_codes(text: str) -> list[str]:
    """Extract code-like tokens (e.g. 419/1160, 52016) from a description."""
    patterns = (
        r"\b\d{3,4}[-/]\d{3,6}\b",
        r"\b\d{4,}\b",
        r"\b[A-Z0-9]{4,}\b",
    )
    codes: list[str] = []
    for pattern in patterns:
        for match in re.findall(pattern, text or ""):
            if match not in codes:
                codes.append(match)
    return codes
