"""Google Programmable Search (Custom Search JSON API)."""
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from jobscout.config import settings
from jobscout.schemas.job_search import Language
from jobscout.services.errors import ProviderUnavailable
from jobscout.services.providers.base import PRIMARY_SITE_CLAUSE, SearchProvider

CSE_URL = "https://www.googleapis.com/customsearch/v1"


class CseItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str | None = None
    html_title: str | None = Field(None, alias="htmlTitle")
    snippet: str | None = None
    html_snippet: str | None = Field(None, alias="htmlSnippet")
    link: str | None = None
    formatted_url: str | None = Field(None, alias="formattedUrl")


class CseResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[CseItem] | None = None


class GoogleCseProvider(SearchProvider):
    name = "google_cse"
    fallback_source = "google"

    def __init__(self, client, api_key: str | None = None, cx: str | None = None, timeout: float | None = None):
        super().__init__(client, timeout)
        self.api_key = api_key if api_key is not None else settings.google_cse_api_key
        self.cx = cx if cx is not None else settings.google_cse_cx

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.cx)

    async def _fetch(self, query: str, lang: Language, primary_sites_only: bool) -> list[tuple[str, str, str]]:
        q = f"{query} ({PRIMARY_SITE_CLAUSE})" if primary_sites_only else query
        data = await self._request(
            "GET",
            CSE_URL,
            params={
                "key": self.api_key,
                "cx": self.cx,
                "q": q,
                "gl": "kw",
                "cr": "countryKW",
                "lr": "lang_ar" if lang == "ar" else "lang_en",
                "safe": "active",
                "num": "10",
            },
        )
        try:
            parsed = CseResponse.model_validate(data)
        except ValidationError as exc:
            raise ProviderUnavailable(f"unexpected response shape: {exc.error_count()} errors") from exc
        return [
            (
                item.title or item.html_title or "",
                item.snippet or item.html_snippet or "",
                item.link or item.formatted_url or "",
            )
            for item in parsed.items or []
        ]
