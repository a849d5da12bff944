"""
Job search orchestration shared by the blocking and streaming endpoints.

    expand query -> internal postings -> providers (site-scoped, then broad)
    -> filter/dedupe -> listing pages if scarce -> relevance -> enrich -> rank
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult, Language
from jobscout.services.cache import SessionCache
from jobscout.services.dedupe import filter_and_dedupe, merge_unique
from jobscout.services.enricher import DetailEnricher
from jobscout.services.followup import FollowUpAnswer, answer_from_session
from jobscout.services.internal_jobs import InternalJobSearch
from jobscout.services.providers import SearchProvider
from jobscout.services.query_expander import QueryExpander, location_word
from jobscout.services.ranking import RankingWeights, rank_results
from jobscout.services.relevance import RelevancePenalties, apply_relevance_filter
from jobscout.services.summarizer import Summarizer, no_results_message
from jobscout.utils.text import has_arabic

logger = logging.getLogger(__name__)

# Gathering stops once this many hits are in hand.
GATHER_LIMIT = 20
GATHER_LIMIT_WITH_LISTINGS = 30
# Fewer gathered hits than this after the site-scoped pass triggers a broad pass.
BROAD_PASS_BELOW = 5
# Fewer postings than this after filtering triggers the listing-page pass.
LISTING_PASS_BELOW = 3


def detect_language(query: str, lang: Language | None = None) -> Language:
    if lang:
        return lang
    return "ar" if has_arabic(query) else "en"


@dataclass
class SearchOutcome:
    results: list[JobResult]
    answer: str | None
    from_cache: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobSearchPipeline:
    def __init__(
        self,
        providers: list[SearchProvider],
        expander: QueryExpander,
        enricher: DetailEnricher,
        summarizer: Summarizer,
        session_cache: SessionCache,
        internal_jobs: InternalJobSearch | None = None,
        weights: RankingWeights | None = None,
        penalties: RelevancePenalties | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.providers = providers
        self.expander = expander
        self.enricher = enricher
        self.summarizer = summarizer
        self.session_cache = session_cache
        self.internal_jobs = internal_jobs
        self.weights = weights or RankingWeights.from_settings()
        self.penalties = penalties or RelevancePenalties.from_settings()
        self._clock = clock

    def answer_followup(self, session_id: str | None, query: str, lang: Language) -> FollowUpAnswer | None:
        if not session_id:
            return None
        return answer_from_session(self.session_cache.get(session_id), query, lang)

    def remember(self, session_id: str | None, results: list[JobResult]):
        if session_id:
            self.session_cache.put(session_id, results)

    async def _query_providers(
        self, query: str, lang: Language, primary_sites_only: bool, allow_listings: bool
    ) -> list[JobResult]:
        # Later providers are only asked when earlier ones came back empty.
        for provider in self.providers:
            part = await provider.search(
                query, lang, allow_listings=allow_listings, primary_sites_only=primary_sites_only
            )
            _debug("provider-results", provider=provider.name, query=query, count=len(part),
                   primary_sites_only=primary_sites_only, allow_listings=allow_listings)
            if part:
                return part
        return []

    async def _collect(
        self,
        queries: list[str],
        lang: Language,
        gathered: list[JobResult],
        primary_sites_only: bool,
        allow_listings: bool = False,
    ):
        loc = location_word(lang)
        limit = GATHER_LIMIT_WITH_LISTINGS if allow_listings else GATHER_LIMIT
        for query in queries:
            scoped = query if loc.lower() in query.lower() else f"{query} {loc}"
            gathered.extend(await self._query_providers(scoped, lang, primary_sites_only, allow_listings))
            if len(gathered) >= limit:
                break

    async def _gather(self, queries: list[str], lang: Language, gathered: list[JobResult], allow_listings: bool):
        await self._collect(queries, lang, gathered, primary_sites_only=True, allow_listings=allow_listings)
        if len(gathered) < BROAD_PASS_BELOW:
            await self._collect(queries, lang, gathered, primary_sites_only=False, allow_listings=allow_listings)

    async def search(self, query: str, lang: Language) -> list[JobResult]:
        """Run retrieval end to end and return the ranked result list."""
        expanded = await self.expander.expand(query, lang)
        logger.info("Job search %r lang=%s queries=%d", query[:50], lang, len(expanded.queries))

        gathered: list[JobResult] = []
        if self.internal_jobs is not None:
            gathered.extend(await asyncio.to_thread(self.internal_jobs.search, query, lang))
        internal_count = len(gathered)

        await self._gather(expanded.queries, lang, gathered, allow_listings=False)
        filtered = filter_and_dedupe(gathered, weights=self.weights)

        if len(filtered) < LISTING_PASS_BELOW:
            await self._gather(expanded.queries, lang, gathered, allow_listings=True)
            listings = filter_and_dedupe(gathered, allow_listings=True, weights=self.weights)
            filtered = merge_unique(filtered, listings)

        if not filtered:
            logger.info("Job search %r found nothing", query[:50])
            return []

        internal = [h for h in filtered if h.is_internal]
        external = [h for h in filtered if not h.is_internal]
        basis = " ".join(expanded.queries) or (external[0].title if external else "")
        relevant = apply_relevance_filter(basis, external, expanded.role_tokens, self.penalties)
        limited = (internal + relevant)[: settings.max_results]
        _debug("pipeline-summary", internal=internal_count, gathered=len(gathered),
               filtered=len(filtered), relevant=len(relevant), limited=len(limited))

        enriched = await self.enricher.enrich(limited)
        ranked = rank_results(enriched, self._clock(), self.weights)
        _debug("ranked-summary", enriched=len(enriched), ranked=len(ranked),
               with_salary=sum(1 for h in ranked if h.salary))
        logger.info("Job search %r returned %d results", query[:50], len(ranked))
        return ranked

    async def run(self, query: str, lang: Language, session_id: str | None = None) -> SearchOutcome:
        """Blocking flavour: results plus a one-shot summary."""
        followup = self.answer_followup(session_id, query, lang)
        if followup:
            return SearchOutcome(results=followup.results, answer=followup.answer, from_cache=True)

        results = await self.search(query, lang)
        self.remember(session_id, results)

        answer = await self.summarizer.summarize(query, results, lang)
        if not results and not answer:
            answer = no_results_message(lang)
        return SearchOutcome(results=results, answer=answer)


def _debug(stage: str, **fields):
    if settings.debug_pipeline:
        logger.debug("%s %s", stage, " ".join(f"{k}={v!r}" for k, v in fields.items()))
