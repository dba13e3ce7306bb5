from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Iterable, Mapping, Optional

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from delivery_insights.models import CommentExample, Delivery

# -------- Domain lexicon (lowercased, weights -5..+5) --------
DOMAIN_TERMS: Mapping[str, float] = {
    "génial": 5, "parfait": 5, "excellent": 4, "super": 4, "rapide": 3,
    "efficace": 3, "satisfait": 3, "bon": 3, "gentil": 2, "sympa": 2,
    "courtois": 2, "aimable": 3, "serviable": 3, "poli": 3, "merci": 4,
    "problème": -3, "mauvais": -3, "endommagé": -4, "cassé": -4,
    "livré en retard": -3, "retard": -2, "en retard": -2, "pas à l'heure": -2,
    "ne recommande pas": -4, "déçu": -3, "colis jeté": -5, "contrariant": -3,
}

# -------- Short-circuit phrases, checked in order before the lexicon --------
_NOTHING_TO_REPORT_RE = re.compile(r"\bras\b")
_SHORT_CIRCUITS: tuple[tuple[tuple[str, ...], float], ...] = (
    (("rien à signaler",), 8.5),
    (("pas de problème", "aucun problème"), 8.0),
    (("rien à dire",), 9.0),
    (("très bien", "tres bien", "parfait", "excellent", "super", "génial"), 8.5),
)

# star rating -> base score on the /10 scale
RATING_SCORES: Mapping[int, float] = {5: 9.5, 4: 7.5, 3: 5.0, 2: 2.5, 1: 0.5}
_DEFAULT_RATING_SCORE = 5.0

_TOKEN_RE = re.compile(r"[\w']+")

POSITIVE_THRESHOLD = 7.0
NEGATIVE_THRESHOLD = 4.0


class CommentPolarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class SentimentResult:
    score: float
    comparative: float = 0.0
    positive_terms: tuple[str, ...] = ()
    negative_terms: tuple[str, ...] = ()


@lru_cache(maxsize=1)
def _base_lexicon() -> dict[str, float]:
    # VADER loads its lexicon file on construction; do it once per process.
    return dict(SentimentIntensityAnalyzer().lexicon)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class SentimentScorer:
    """
    Lexicon scorer for delivery feedback.

    The raw score is the sum of term weights found in the text: multi-word
    domain phrases are matched first, then single tokens against the base
    lexicon overlaid with the domain terms. When a star rating is supplied it
    sets the score and the text only nudges it by raw/10.
    """

    def __init__(self, extra_terms: Optional[Mapping[str, float]] = None) -> None:
        terms = {**DOMAIN_TERMS, **(extra_terms or {})}
        # longest phrases first so "livré en retard" wins over "en retard"
        self.phrases = [
            (t, re.compile(r"(?<!\w)" + re.escape(t) + r"(?!\w)"), float(terms[t]))
            for t in sorted((t for t in terms if " " in t), key=len, reverse=True)
        ]
        self.lexicon = {**_base_lexicon(), **{t: float(w) for t, w in terms.items() if " " not in t}}

    def _short_circuit(self, text: str) -> Optional[SentimentResult]:
        if _NOTHING_TO_REPORT_RE.search(text):
            return SentimentResult(score=8.5, comparative=1.0, positive_terms=("ras",))
        for phrases, score in _SHORT_CIRCUITS:
            for phrase in phrases:
                if phrase in text:
                    return SentimentResult(score=score, comparative=1.0, positive_terms=(phrase,))
        return None

    def lexicon_score(self, text: str) -> SentimentResult:
        """Raw (unscaled) lexicon score; `score` is the signed sum of weights."""
        remaining = text.lower()
        raw = 0.0
        positive: list[str] = []
        negative: list[str] = []

        def _hit(term: str, weight: float) -> None:
            nonlocal raw
            raw += weight
            if weight > 0:
                positive.append(term)
            elif weight < 0:
                negative.append(term)

        for phrase, pattern, weight in self.phrases:
            for _ in pattern.findall(remaining):
                _hit(phrase, weight)
            remaining = pattern.sub(" ", remaining)

        tokens = _TOKEN_RE.findall(remaining)
        for token in tokens:
            weight = self.lexicon.get(token)
            if weight is not None:
                _hit(token, weight)

        comparative = raw / len(tokens) if tokens else 0.0
        return SentimentResult(
            score=raw,
            comparative=comparative,
            positive_terms=tuple(positive),
            negative_terms=tuple(negative),
        )

    def score(self, comment: str, rating: Optional[int] = None) -> SentimentResult:
        text = (comment or "").lower()

        short = self._short_circuit(text)
        if short is not None:
            return short

        lex = self.lexicon_score(text)

        if rating is not None:
            base = RATING_SCORES.get(rating, _DEFAULT_RATING_SCORE)
            score = _clamp(base + lex.score / 10, 0.0, 10.0)
        else:
            score = (_clamp(lex.score, -10.0, 10.0) + 10) / 2

        return SentimentResult(
            score=score,
            comparative=lex.comparative,
            positive_terms=lex.positive_terms,
            negative_terms=lex.negative_terms,
        )


@lru_cache(maxsize=1)
def default_scorer() -> SentimentScorer:
    return SentimentScorer()


def analyze_sentiment(comment: str, rating: Optional[int] = None) -> SentimentResult:
    return default_scorer().score(comment, rating)


def get_top_comments(
    records: Iterable[Delivery],
    polarity: CommentPolarity | str,
    count: int = 3,
    *,
    scorer: Optional[SentimentScorer] = None,
) -> list[CommentExample]:
    """
    Most positive (score > 7, best first) or most negative (score < 4, worst
    first) comments. Ties keep input order.
    """
    polarity = CommentPolarity(polarity)
    scorer = scorer or default_scorer()

    scored = [
        CommentExample(
            comment=r.comment,
            score=scorer.score(r.comment, r.rating).score,
            driver=r.driver,
        )
        for r in records
        if r.comment and len(r.comment.strip()) > 1
    ]

    if polarity is CommentPolarity.POSITIVE:
        picked = [c for c in scored if c.score > POSITIVE_THRESHOLD]
        picked.sort(key=lambda c: c.score, reverse=True)
    else:
        picked = [c for c in scored if c.score < NEGATIVE_THRESHOLD]
        picked.sort(key=lambda c: c.score)
    return picked[:count]
