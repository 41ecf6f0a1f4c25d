"""Fuzzy job-name matching between the job ledger and the time-clock export.

Scores are the max of four fuzzywuzzy measures so that partial names,
trailing region codes and reordered words still line up. Ties keep the
first candidate scanned.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Mapping, Sequence, TypeVar
from fuzzywuzzy import fuzz

logger = logging.getLogger(__name__)

T = TypeVar("T")

CROSS_SOURCE_MIN_CONFIDENCE = 80
DISAMBIGUATION_MIN_CONFIDENCE = 70
DUPLICATE_JOB_MIN_CONFIDENCE = 85
REVIEW_THRESHOLD = 95

_JOB_SUFFIX_RE = re.compile(r"\s*-\s*(ARL|REVISED|SM|CLI|PM|SD|LAK|WA|CA)\s*$", re.IGNORECASE)
_SPACES_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class BestMatch(Generic[T]):
    candidate: T
    score: int

    @property
    def needs_review(self) -> bool:
        return self.score < REVIEW_THRESHOLD


def similarity(a: str | None, b: str | None) -> int:
    """0-100 similarity: max of ratio, partial, token-sort and token-set ratios."""
    if not a or not b:
        return 0
    return max(
        fuzz.ratio(a, b),
        fuzz.partial_ratio(a, b),
        fuzz.token_sort_ratio(a, b),
        fuzz.token_set_ratio(a, b),
    )


def job_name_of(candidate: Any) -> str:
    if isinstance(candidate, str):
        return candidate
    if isinstance(candidate, Mapping):
        return str(candidate.get("job_name") or "")
    return str(getattr(candidate, "job_name", "") or "")


def find_best_match(
    name: str | None,
    candidates: Sequence[T] | None,
    min_confidence: int = CROSS_SOURCE_MIN_CONFIDENCE,
    key: Callable[[T], str] = job_name_of,
) -> BestMatch[T] | None:
    """Best candidate scoring at least ``min_confidence``, else None."""
    if not name or not candidates:
        return None

    best: BestMatch[T] | None = None
    for candidate in candidates:
        score = similarity(name, key(candidate))
        if score >= min_confidence and (best is None or score > best.score):
            best = BestMatch(candidate=candidate, score=score)

    if best is not None:
        logger.info("MATCH: %r -> %r (%d%%)", name, key(best.candidate), best.score)
    return best


def match_status(
    score: int,
    min_confidence: int = CROSS_SOURCE_MIN_CONFIDENCE,
    review_threshold: int = REVIEW_THRESHOLD,
) -> str:
    if not score or score < min_confidence:
        return "no_match"
    if score >= review_threshold:
        return "matched"
    return "needs_review"


def normalize_job_name(name: str | None) -> str:
    """Drop trailing region / revision suffixes such as ``- ARL`` or ``- REVISED``."""
    if not name:
        return ""
    return _SPACES_RE.sub(" ", _JOB_SUFFIX_RE.sub("", name)).strip()


def best_scoring(
    name: str, candidates: Iterable[T], key: Callable[[T], str],
) -> BestMatch[T] | None:
    """Highest-scoring candidate regardless of threshold (first wins ties)."""
    best: BestMatch[T] | None = None
    for candidate in candidates:
        score = similarity(name, key(candidate))
        if best is None or score > best.score:
            best = BestMatch(candidate=candidate, score=score)
    return best
