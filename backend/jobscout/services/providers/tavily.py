"""Tavily web search API."""
from pydantic import BaseModel, ConfigDict, ValidationError

from jobscout.config import settings
from jobscout.schemas.job_search import Language
from jobscout.services.errors import ProviderUnavailable
from jobscout.services.providers.base import PRIMARY_DOMAINS, SearchProvider

TAVILY_URL = "https://api.tavily.com/search"


class TavilyResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    content: str | None = None
    snippet: str | None = None
    url: str | None = None


class TavilyResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[TavilyResult] | None = None


class TavilyProvider(SearchProvider):
    name = "tavily"

    def __init__(self, client, api_key: str | None = None, timeout: float | None = None):
        super().__init__(client, timeout)
        self.api_key = api_key if api_key is not None else settings.tavily_api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _fetch(self, query: str, lang: Language, primary_sites_only: bool) -> list[tuple[str, str, str]]:
        body = {
            "api_key": self.api_key,
            "query": query,
            "search_depth": "basic",
            "max_results": 10,
            "include_answer": False,
        }
        if primary_sites_only:
            body["include_domains"] = PRIMARY_DOMAINS
        data = await self._request("POST", TAVILY_URL, json=body)
        try:
            parsed = TavilyResponse.model_validate(data)
        except ValidationError as exc:
            raise ProviderUnavailable(f"unexpected response shape: {exc.error_count()} errors") from exc
        return [
            (r.title or "", r.content or r.snippet or "", r.url or "")
            for r in parsed.results or []
        ]
