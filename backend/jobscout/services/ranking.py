"""
Posting age heuristics, staleness filtering and the final result ordering.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from dateutil import parser as date_parser

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult
from jobscout.services.url_classifier import host_priority, is_listing_page
from jobscout.utils.text import collapse_whitespace, host_of

_THIRTY_PLUS = re.compile(r"30\+\s+days\s+ago")
_RELATIVE = re.compile(r"(\d+)\s+(hour|day|week|month|year)s?\s+ago")
_DIGIT = re.compile(r"\d")

UNIT_DELTAS = {
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


@dataclass(frozen=True)
class RankingWeights:
    recency_bonus_week: int = -2
    recency_bonus_fortnight: int = -1
    max_post_age_days: int = 30
    linkedin_max_age_days: int = 14

    @classmethod
    def from_settings(cls) -> "RankingWeights":
        return cls(
            recency_bonus_week=settings.recency_bonus_week,
            recency_bonus_fortnight=settings.recency_bonus_fortnight,
            max_post_age_days=settings.max_post_age_days,
            linkedin_max_age_days=settings.linkedin_max_age_days,
        )


def parse_posted_timestamp(value: str | None, now: datetime) -> datetime | None:
    """Best-effort timestamp for free-text posting dates like "3 days ago" or "Oct 5, 2025"."""
    text = collapse_whitespace(value)
    if not text:
        return None
    text = text.lower()

    if _THIRTY_PLUS.search(text):
        return now - timedelta(days=60)

    m = _RELATIVE.search(text)
    if m:
        return now - UNIT_DELTAS[m.group(2)] * int(m.group(1))

    if not _DIGIT.search(text):
        return None
    try:
        parsed = date_parser.parse(text, default=now.replace(hour=0, minute=0, second=0, microsecond=0))
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _age_days(ts: datetime, now: datetime) -> float:
    return (now - ts).total_seconds() / 86400


def posted_timestamp(hit: JobResult, now: datetime) -> datetime | None:
    for source in (hit.posted_at, hit.snippet, hit.title):
        ts = parse_posted_timestamp(source, now)
        if ts is not None:
            return ts
    return None


def is_likely_stale(hit: JobResult, now: datetime, max_age_days: int | None = None) -> bool:
    horizon = settings.max_post_age_days if max_age_days is None else max_age_days
    for source in (hit.posted_at, hit.snippet, hit.title):
        ts = parse_posted_timestamp(source, now)
        if ts is None:
            continue
        age = _age_days(ts, now)
        if age > horizon:
            return True
        if age >= 0:
            return False
    # No usable date is not evidence of staleness.
    return False


def recency_bonus(hit: JobResult, now: datetime, weights: RankingWeights) -> int:
    ts = posted_timestamp(hit, now)
    if ts is None:
        return 0
    age = _age_days(ts, now)
    if 0 <= age <= 7:
        return weights.recency_bonus_week
    if 7 < age <= 14:
        return weights.recency_bonus_fortnight
    return 0


def compute_score(hit: JobResult, now: datetime, weights: RankingWeights | None = None) -> int:
    """Priority score of a hit; lower sorts first."""
    weights = weights or RankingWeights.from_settings()
    no_company_penalty = 0 if hit.company else 1
    listing_penalty = 2 if is_listing_page(hit.title) else 0
    return host_priority(hit.url) + no_company_penalty + listing_penalty + recency_bonus(hit, now, weights)


def _is_linkedin(hit: JobResult) -> bool:
    host = host_of(hit.url) or ""
    return host == "linkedin.com" or host.endswith(".linkedin.com")


def _recent_enough_for_linkedin(hit: JobResult, now: datetime, weights: RankingWeights) -> bool:
    ts = parse_posted_timestamp(hit.posted_at or hit.snippet or hit.title, now)
    if ts is None:
        # Undated LinkedIn results are mostly expired postings.
        return False
    return _age_days(ts, now) <= weights.linkedin_max_age_days


def rank_results(hits: list[JobResult], now: datetime, weights: RankingWeights | None = None) -> list[JobResult]:
    """Drop stale postings and order the rest: internal first, then newest first, dated before undated."""
    weights = weights or RankingWeights.from_settings()

    kept = [
        h for h in hits
        if h.is_internal or (
            not is_likely_stale(h, now, weights.max_post_age_days)
            and (not _is_linkedin(h) or _recent_enough_for_linkedin(h, now, weights))
        )
    ]
    final = kept if kept else list(hits)

    def sort_key(hit: JobResult):
        ts = posted_timestamp(hit, now)
        return (
            0 if hit.is_internal else 1,
            0 if ts is not None else 1,
            -ts.timestamp() if ts is not None else 0.0,
        )

    return sorted(final, key=sort_key)
