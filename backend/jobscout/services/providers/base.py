import logging
from abc import ABC, abstractmethod

import httpx

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult, Language
from jobscout.services.dedupe import filter_and_dedupe
from jobscout.services.errors import ProviderUnavailable
from jobscout.services.extraction import extract_company_and_location
from jobscout.utils.text import host_of

logger = logging.getLogger(__name__)

PRIMARY_DOMAINS = ["bayt.com", "linkedin.com", "indeed.com", "kw.indeed.com", "indeed.com.kw"]
PRIMARY_SITE_CLAUSE = "site:bayt.com OR site:linkedin.com OR site:kw.indeed.com OR site:indeed.com.kw OR site:indeed.com"


class SearchProvider(ABC):
    """A web-search backend that returns job-posting hits.

    ``search`` never raises: missing credentials, transport errors, non-2xx
    responses and unreadable bodies all come back as an empty list.
    """

    name: str = "provider"
    fallback_source: str = "web"

    def __init__(self, client: httpx.AsyncClient, timeout: float | None = None):
        self.client = client
        self.timeout = timeout or settings.provider_timeout_seconds

    @property
    @abstractmethod
    def configured(self) -> bool:
        pass

    @abstractmethod
    async def _fetch(self, query: str, lang: Language, primary_sites_only: bool) -> list[tuple[str, str, str]]:
        """Raw (title, snippet, url) triples; raises ProviderUnavailable."""

    async def search(
        self,
        query: str,
        lang: Language,
        allow_listings: bool = False,
        primary_sites_only: bool = False,
    ) -> list[JobResult]:
        if not self.configured:
            return []
        try:
            raw = await self._fetch(query, lang, primary_sites_only)
        except ProviderUnavailable as exc:
            logger.warning("%s search failed for %r: %s", self.name, query, exc)
            return []
        hits = [self._to_result(title, snippet, url) for title, snippet, url in raw if url]
        return filter_and_dedupe(hits, allow_listings=allow_listings)

    def _to_result(self, title: str, snippet: str, url: str) -> JobResult:
        company, location = extract_company_and_location(title, snippet)
        return JobResult(
            title=title,
            url=url,
            source=host_of(url) or self.fallback_source,
            snippet=snippet,
            company=company,
            location=location,
        )

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = await self.client.request(method, url, timeout=self.timeout, **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"transport error: {exc!r}") from exc
        if response.is_error:
            raise ProviderUnavailable(f"HTTP {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderUnavailable("response body is not JSON") from exc
        if not isinstance(data, dict):
            raise ProviderUnavailable("response body is not a JSON object")
        return data
