"""Deterministic scoring of glossary terms.

Every place that needs a score (CI feedback, leaderboards, the exporter log)
calls :func:`score`; there is no second implementation anywhere.

Formula
-------
=============  ==============================================  =====
component      rule                                            cap
=============  ==============================================  =====
base           always (term and definition are guaranteed)     20
humor          ``len(humor) // 5``                             30
explanation    20 if ``len(explanation) > 20``                 20
tags           ``3 * len(tags)``                               10
crossrefs      ``5 * len(see_also)``                           20
=============  ==============================================  =====

``total = min(100, sum of components)``.

Badges
------
- ``Perfectionist``: total >= 90
- ``Comedy Gold``: humor longer than 100 characters
- ``Flame Warrior``: any controversy level is set
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .contracts.term import Term

BASE_POINTS = 20
HUMOR_CAP = 30
HUMOR_CHARS_PER_POINT = 5
EXPLANATION_POINTS = 20
EXPLANATION_MIN_CHARS = 20
TAG_POINTS = 3
TAG_CAP = 10
CROSSREF_POINTS = 5
CROSSREF_CAP = 20
MAX_SCORE = 100

PERFECTIONIST = "Perfectionist"
COMEDY_GOLD = "Comedy Gold"
FLAME_WARRIOR = "Flame Warrior"

PERFECTIONIST_THRESHOLD = 90
COMEDY_GOLD_MIN_CHARS = 100


@dataclass(frozen=True, slots=True)
class ScoreComponents:
    base: int
    humor: int
    explanation: int
    tags: int
    crossrefs: int

    def as_dict(self) -> dict[str, int]:
        return {
            "base": self.base,
            "humor": self.humor,
            "explanation": self.explanation,
            "tags": self.tags,
            "crossrefs": self.crossrefs,
        }


@dataclass(frozen=True, slots=True)
class ScoreCard:
    """Score of one term: capped total, per-component points and badges."""

    total: int
    components: ScoreComponents
    badges: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class RankedTerm:
    rank: int
    term: Term
    card: ScoreCard


def score(term: Term) -> ScoreCard:
    """Score ``term`` with the fixed multi-factor formula."""
    humor_len = len(term.humor) if term.humor else 0
    components = ScoreComponents(
        base=BASE_POINTS,
        humor=min(HUMOR_CAP, humor_len // HUMOR_CHARS_PER_POINT),
        explanation=(
            EXPLANATION_POINTS
            if term.explanation and len(term.explanation) > EXPLANATION_MIN_CHARS
            else 0
        ),
        tags=min(TAG_CAP, TAG_POINTS * len(term.tags or ())),
        crossrefs=min(CROSSREF_CAP, CROSSREF_POINTS * len(term.see_also or ())),
    )
    total = min(MAX_SCORE, sum(components.as_dict().values()))

    badges: list[str] = []
    if total >= PERFECTIONIST_THRESHOLD:
        badges.append(PERFECTIONIST)
    if humor_len > COMEDY_GOLD_MIN_CHARS:
        badges.append(COMEDY_GOLD)
    if term.controversy_level is not None:
        badges.append(FLAME_WARRIOR)

    return ScoreCard(total=total, components=components, badges=tuple(badges))


def rank_terms(terms: Sequence[Term]) -> list[RankedTerm]:
    """Order terms by score, highest first; ties keep source order.

    Equal totals share a rank (1, 2, 2, 4, ...).
    """
    cards = [(term, score(term)) for term in terms]
    ordered = sorted(cards, key=lambda pair: -pair[1].total)

    ranked: list[RankedTerm] = []
    for position, (term, card) in enumerate(ordered, start=1):
        if ranked and ranked[-1].card.total == card.total:
            rank = ranked[-1].rank
        else:
            rank = position
        ranked.append(RankedTerm(rank=rank, term=term, card=card))
    return ranked


__all__ = [
    "PERFECTIONIST",
    "COMEDY_GOLD",
    "FLAME_WARRIOR",
    "ScoreComponents",
    "ScoreCard",
    "RankedTerm",
    "score",
    "rank_terms",
]
