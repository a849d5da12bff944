"""
Fills in salary, employment type and posted date for the top hits.

Snippet text is scanned first. Hits still missing a field have their posting
page fetched (a bounded handful, concurrently) and the stripped page text is
run through the same rule tables. Page results are memoized per URL.
"""
import asyncio
import logging

import httpx

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult
from jobscout.services.cache import DetailCache, DetailRecord
from jobscout.services.errors import ScrapeFailure
from jobscout.services.extraction import extract_metadata, html_to_text, trim_noise

logger = logging.getLogger(__name__)

ACCEPT_LANGUAGE = "en-US,en;q=0.9,ar;q=0.8"


def _needs_details(hit: JobResult) -> bool:
    # Internal postings already carry everything the job store has.
    if hit.is_internal:
        return False
    return not (hit.salary and hit.employment_type and hit.posted_at)


def _merge(hit: JobResult, found: dict[str, str] | DetailRecord) -> JobResult:
    if isinstance(found, DetailRecord):
        found = {
            "salary": found.salary,
            "employment_type": found.employment_type,
            "posted_at": found.posted_at,
        }
    update = {k: v for k, v in found.items() if v}
    return hit.model_copy(update=update) if update else hit


class DetailEnricher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: DetailCache,
        max_fetches: int | None = None,
        timeout: float | None = None,
        max_chars: int | None = None,
    ):
        self.client = client
        self.cache = cache
        self.max_fetches = max_fetches or settings.enrich_max_fetches
        self.timeout = timeout or settings.enrich_timeout_seconds
        self.max_chars = max_chars or settings.enrich_max_chars

    async def fetch_details(self, url: str) -> dict[str, str]:
        """Scrape one posting page; raises ScrapeFailure."""
        try:
            response = await self.client.get(
                url,
                headers={"User-Agent": settings.enrich_user_agent, "Accept-Language": ACCEPT_LANGUAGE},
                follow_redirects=True,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise ScrapeFailure(f"{url}: {exc!r}") from exc
        if response.is_error:
            raise ScrapeFailure(f"{url}: HTTP {response.status_code}")
        return extract_metadata(html_to_text(response.text, self.max_chars))

    async def _enrich_one(self, hit: JobResult) -> JobResult:
        try:
            found = await self.fetch_details(hit.url)
        except ScrapeFailure as exc:
            logger.info("Detail scrape failed: %s", exc)
            return hit
        if found:
            self.cache.set(hit.url, DetailRecord(**found))
        return _merge(hit, found)

    async def enrich(self, hits: list[JobResult]) -> list[JobResult]:
        if not hits:
            return hits
        merged: list[JobResult] = []
        to_fetch: list[int] = []
        for hit in hits:
            hit = _merge(hit, extract_metadata(hit.snippet))
            cached = self.cache.get(hit.url)
            if cached is not None:
                hit = _merge(hit, cached)
            elif _needs_details(hit) and len(to_fetch) < self.max_fetches:
                to_fetch.append(len(merged))
            merged.append(hit)

        if to_fetch:
            fetched = await asyncio.gather(*(self._enrich_one(merged[i]) for i in to_fetch))
            for i, hit in zip(to_fetch, fetched):
                merged[i] = hit

        return [trim_noise(hit) for hit in merged]
