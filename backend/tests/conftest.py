import asyncio
from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from jobscout.config import settings
from jobscout.database import init_db
from jobscout.dependencies import rate_limiter
from jobscout.main import app
from jobscout.services.cache import DetailCache, SessionCache
from jobscout.services.enricher import DetailEnricher
from jobscout.services.internal_jobs import InternalJobSearch
from jobscout.services.pipeline import JobSearchPipeline
from jobscout.services.providers import SearchProvider
from jobscout.services.query_expander import QueryExpander
from jobscout.services.summarizer import Summarizer

NOW = datetime(2025, 10, 20, 12, 0, tzinfo=timezone.utc)


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FakeProvider(SearchProvider):
    """Serves canned (title, snippet, url) triples and records every query it was asked."""

    def __init__(self, name: str = "fake", hits=None, by_query=None):
        super().__init__(client=None, timeout=1.0)
        self.name = name
        self.hits = hits or []
        self.by_query = by_query
        self.calls: list[dict] = []

    @property
    def configured(self) -> bool:
        return True

    async def _fetch(self, query, lang, primary_sites_only):
        self.calls.append({"query": query, "lang": lang, "primary_sites_only": primary_sites_only})
        if self.by_query is not None:
            return self.by_query(query, primary_sites_only)
        return list(self.hits)


class StubLLM:
    """Stands in for LLMClient; returns canned payloads and records prompts."""

    def __init__(self, queries=None, summary="Summary [1]", chunks=None, fail=None):
        self.queries = queries
        self.summary = summary
        self.chunks = chunks if chunks is not None else ["Top ", "picks [1]"]
        self.fail = fail
        self.prompts: list[tuple[str, str]] = []

    async def complete_json(self, system, user, temperature=0.3, max_tokens=150):
        self.prompts.append((system, user))
        if self.fail:
            raise self.fail
        return {"queries": self.queries or []}

    async def complete(self, system, user, temperature=0.2, max_tokens=500):
        self.prompts.append((system, user))
        if self.fail:
            raise self.fail
        return self.summary

    async def stream(self, system, user, temperature=0.2, max_tokens=500):
        self.prompts.append((system, user))
        if self.fail:
            raise self.fail
        for chunk in self.chunks:
            yield chunk

    async def close(self):
        pass


def page_transport(pages: dict[str, str] | None = None, requested: list[str] | None = None):
    """MockTransport serving ``pages`` by URL; anything else is a 404."""
    pages = pages or {}

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if requested is not None:
            requested.append(url)
        if url in pages:
            return httpx.Response(200, text=pages[url])
        return httpx.Response(404, text="not found")

    return httpx.MockTransport(handler)


@pytest.fixture
def test_db(tmp_path):
    db_path = tmp_path / "jobs.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    init_db(db_path)

    yield TestSession
    engine.dispose()


@pytest.fixture
def make_pipeline(test_db):
    """Builds a pipeline around fake providers, a stub model and mocked posting pages."""
    clients: list[httpx.AsyncClient] = []

    def build(providers, llm=None, pages=None, requested=None, with_internal=True):
        http_client = httpx.AsyncClient(transport=page_transport(pages, requested))
        clients.append(http_client)
        return JobSearchPipeline(
            providers=providers,
            expander=QueryExpander(llm),
            enricher=DetailEnricher(http_client, DetailCache()),
            summarizer=Summarizer(llm),
            session_cache=SessionCache(),
            internal_jobs=InternalJobSearch(test_db) if with_internal else None,
            clock=lambda: NOW,
        )

    yield build
    for http_client in clients:
        asyncio.run(http_client.aclose())


@pytest.fixture
def client(tmp_path, test_db):
    original_data_path = settings.data_path
    settings.data_path = tmp_path
    rate_limiter.reset()
    with TestClient(app) as c:
        yield c
    rate_limiter.reset()
    settings.data_path = original_data_path
