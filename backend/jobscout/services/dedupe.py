import logging
from datetime import datetime, timezone

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult
from jobscout.services.extraction import trim_noise
from jobscout.services.ranking import RankingWeights, compute_score
from jobscout.services.url_classifier import classify, is_closed_posting, is_listing_page
from jobscout.utils.text import url_key

logger = logging.getLogger(__name__)


def filter_and_dedupe(
    hits: list[JobResult],
    allow_listings: bool = False,
    now: datetime | None = None,
    weights: RankingWeights | None = None,
) -> list[JobResult]:
    """Keep allowed, open, unique postings ordered by priority score (best first)."""
    now = now or datetime.now(timezone.utc)
    weights = weights or RankingWeights.from_settings()
    seen: set[str] = set()
    out: list[JobResult] = []
    for hit in hits:
        # Internal postings live on the platform itself and skip host rules.
        if not hit.is_internal and not classify(hit.url, allow_listings):
            _debug("filtered-disallowed", hit)
            continue
        if is_closed_posting(hit.title, hit.snippet):
            _debug("filtered-closed", hit)
            continue
        if not allow_listings and is_listing_page(hit.title):
            _debug("filtered-listing", hit)
            continue
        key = url_key(hit.url)
        if key in seen:
            continue
        seen.add(key)
        out.append(trim_noise(hit))

    out.sort(key=lambda h: compute_score(h, now, weights))
    if settings.debug_pipeline:
        logger.debug("dedupe-summary allow_listings=%s kept=%d of %d", allow_listings, len(out), len(hits))
    return out


def merge_unique(primary: list[JobResult], extra: list[JobResult]) -> list[JobResult]:
    """Append hits from ``extra`` whose dedup key is not already in ``primary``."""
    merged = list(primary)
    seen = {url_key(h.url) for h in merged}
    for hit in extra:
        key = url_key(hit.url)
        if key not in seen:
            merged.append(hit)
            seen.add(key)
    return merged


def _debug(reason: str, hit: JobResult) -> None:
    if settings.debug_pipeline:
        logger.debug("%s url=%s title=%r", reason, hit.url, hit.title)
