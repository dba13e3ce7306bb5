from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional

from delivery_insights.models import Delivery, IssueDriver
from delivery_insights.rules.sentiment import SentimentScorer, default_scorer

# Output categories, in the order they are checked
BROKEN_ITEMS = "casse articles"
MISSING_ITEMS = "article manquant"
PUNCTUALITY = "ponctualité"
COLD_CHAIN = "rupture chaine de froid"
DRIVER_ATTITUDE = "attitude livreur"
OTHER = "autre"

ISSUE_CATEGORIES: tuple[str, ...] = (
    BROKEN_ITEMS, MISSING_ITEMS, PUNCTUALITY, COLD_CHAIN, DRIVER_ATTITUDE, OTHER,
)

# -------- Text hints (lowercased) --------
_BROKEN_HINTS: tuple[str, ...] = (
    "casse", "cassé", "abimé", "abîmé", "endommagé", "ecrasé", "écrasé",
    "produit ouvert", "bouteille ouverte", "état lamentable", "produit éclaté",
    "crème partout",
)
_MISSING_HINTS: tuple[str, ...] = (
    "manquant", "manque", "oubli", "pas tout", "pas reçu", "incomplet", "pas eu",
    "mauvaise commande", "non livrés",
)
_PUNCTUALITY_HINTS: tuple[str, ...] = (
    "retard", "tard", "tôt", "en avance", "pas à l'heure", "attente", "attendu",
    "jamais arrivé", "pas prévenu", "avant le créneau", "après le créneau",
)
_COLD_CHAIN_HINTS: tuple[str, ...] = (
    "chaud", "pas frais", "pas froid", "congelé", "décongelé", "chaîne du froid",
)
_ATTITUDE_HINTS: tuple[str, ...] = (
    "pas aimable", "agressif", "agressive", "impoli", "désagréable", "pas bonjour",
    "comportement", "irrespectueux", "arrogant", "pas professionnel", "pas poli",
)

_CATEGORY_HINTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (BROKEN_ITEMS, _BROKEN_HINTS),
    (MISSING_ITEMS, _MISSING_HINTS),
    (PUNCTUALITY, _PUNCTUALITY_HINTS),
    (COLD_CHAIN, _COLD_CHAIN_HINTS),
    (DRIVER_ATTITUDE, _ATTITUDE_HINTS),
)

# Comments scoring below this are treated as complaints
COMPLAINT_THRESHOLD = 5.0
_MIN_COMMENT_LENGTH = 5


def _any_in(text: str, phrases: Iterable[str]) -> bool:
    t = (text or "").casefold()
    return any(p in t for p in phrases)


def categorize_comment(comment: str) -> str:
    """First category whose hints appear in the comment, else "autre"."""
    for category, hints in _CATEGORY_HINTS:
        if _any_in(comment, hints):
            return category
    return OTHER


def categorize_complaints(
    records: Iterable[Delivery],
    *,
    scorer: Optional[SentimentScorer] = None,
) -> dict[str, tuple[IssueDriver, ...]]:
    """
    Group negative comments by issue category, then count how often each
    driver shows up per category (most recurrent first).
    """
    scorer = scorer or default_scorer()
    per_category: dict[str, Counter[str]] = {c: Counter() for c in ISSUE_CATEGORIES}

    for d in records:
        if not d.comment or len(d.comment.strip()) <= _MIN_COMMENT_LENGTH:
            continue
        if scorer.score(d.comment, d.rating).score >= COMPLAINT_THRESHOLD:
            continue
        per_category[categorize_comment(d.comment)][d.driver] += 1

    return {
        category: tuple(
            IssueDriver(name=name, recurrence=n)
            for name, n in sorted(counts.items(), key=lambda kv: -kv[1])
        )
        for category, counts in per_category.items()
    }
