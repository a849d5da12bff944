import asyncio
import json

import httpx

from jobscout.services.providers import GoogleCseProvider, TavilyProvider, get_providers
from jobscout.services.providers.base import PRIMARY_DOMAINS, PRIMARY_SITE_CLAUSE


def _client(handler, seen=None):
    def wrapped(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return handler(request)
    return httpx.AsyncClient(transport=httpx.MockTransport(wrapped))


def _search(provider, *args, **kwargs):
    async def run():
        try:
            return await provider.search(*args, **kwargs)
        finally:
            await provider.client.aclose()
    return asyncio.run(run())


CSE_BODY = {
    "kind": "customsearch#search",
    "items": [
        {
            "title": "Accountant - Acme Trading | Bayt.com",
            "snippet": "Posted 2 days ago. Full time role in Kuwait City.",
            "link": "https://www.bayt.com/en/kuwait/job/accountant-1/",
        },
        {
            "htmlTitle": "<b>Accountant</b> jobs",
            "htmlSnippet": "Browse 100 jobs",
            "formattedUrl": "https://www.whatjobs.com/jobs/accountant",
        },
        {"title": "No link at all", "snippet": "x"},
        {
            "title": "Senior Accountant at Zain",
            "snippet": "Job Closed",
            "link": "https://kw.linkedin.com/jobs/view/99",
        },
    ],
}


class TestGoogleCse:
    def test_request_params_and_mapping(self):
        seen = []
        provider = GoogleCseProvider(_client(lambda r: httpx.Response(200, json=CSE_BODY), seen), api_key="k", cx="cx")
        hits = _search(provider, "accountant Kuwait", "en", primary_sites_only=True)

        params = seen[0].url.params
        assert params["q"] == f"accountant Kuwait ({PRIMARY_SITE_CLAUSE})"
        assert params["gl"] == "kw"
        assert params["cr"] == "countryKW"
        assert params["lr"] == "lang_en"
        assert params["safe"] == "active"
        assert params["num"] == "10"

        assert len(hits) == 1
        hit = hits[0]
        assert hit.source == "bayt.com"
        assert hit.company == "Acme Trading"
        assert hit.location == "Kuwait City"

    def test_arabic_language_restriction(self):
        seen = []
        provider = GoogleCseProvider(_client(lambda r: httpx.Response(200, json={}), seen), api_key="k", cx="cx")
        assert _search(provider, "محاسب الكويت", "ar") == []
        assert seen[0].url.params["lr"] == "lang_ar"
        assert "site:" not in seen[0].url.params["q"]

    def test_missing_credentials_skip_request(self):
        seen = []
        provider = GoogleCseProvider(_client(lambda r: httpx.Response(200, json=CSE_BODY), seen), api_key="", cx="")
        assert _search(provider, "accountant Kuwait", "en") == []
        assert seen == []

    def test_http_error_is_empty(self):
        provider = GoogleCseProvider(_client(lambda r: httpx.Response(429, json={"error": "quota"})), api_key="k", cx="cx")
        assert _search(provider, "accountant Kuwait", "en") == []

    def test_transport_error_is_empty(self):
        def boom(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        provider = GoogleCseProvider(_client(boom), api_key="k", cx="cx")
        assert _search(provider, "accountant Kuwait", "en") == []

    def test_unreadable_body_is_empty(self):
        provider = GoogleCseProvider(_client(lambda r: httpx.Response(200, text="<html>oops</html>")), api_key="k", cx="cx")
        assert _search(provider, "accountant Kuwait", "en") == []

    def test_wrong_shape_is_empty(self):
        provider = GoogleCseProvider(_client(lambda r: httpx.Response(200, json={"items": "nope"})), api_key="k", cx="cx")
        assert _search(provider, "accountant Kuwait", "en") == []


class TestTavily:
    def test_body_and_mapping(self):
        seen = []
        body = {"results": [
            {"title": "Data Analyst - Gulf Bank", "content": "Hawali office", "url": "https://kw.indeed.com/viewjob?jk=5",
             "score": 0.9},
            {"title": "Data analyst jobs", "url": "https://kw.indeed.com/jobs?q=data+analyst"},
        ]}
        provider = TavilyProvider(_client(lambda r: httpx.Response(200, json=body), seen), api_key="tv")
        hits = _search(provider, "data analyst Kuwait", "en", primary_sites_only=True)

        sent = json.loads(seen[0].content)
        assert seen[0].url == "https://api.tavily.com/search"
        assert sent["query"] == "data analyst Kuwait"
        assert sent["include_domains"] == PRIMARY_DOMAINS
        assert sent["search_depth"] == "basic"
        assert sent["max_results"] == 10
        assert sent["include_answer"] is False

        assert [h.url for h in hits] == ["https://kw.indeed.com/viewjob?jk=5"]
        assert hits[0].company == "Gulf Bank"
        assert hits[0].location == "Hawali"

    def test_listing_urls_kept_when_widened(self):
        body = {"results": [{"title": "Data analyst jobs", "url": "https://kw.indeed.com/jobs?q=data+analyst"}]}
        provider = TavilyProvider(_client(lambda r: httpx.Response(200, json=body)), api_key="tv")
        hits = _search(provider, "data analyst Kuwait", "en", allow_listings=True)
        assert len(hits) == 1

    def test_broad_search_has_no_domain_filter(self):
        seen = []
        provider = TavilyProvider(_client(lambda r: httpx.Response(200, json={"results": None}), seen), api_key="tv")
        assert _search(provider, "data analyst Kuwait", "en") == []
        assert "include_domains" not in json.loads(seen[0].content)


class TestRegistry:
    def test_only_configured_providers(self, monkeypatch):
        from jobscout.config import settings

        monkeypatch.setattr(settings, "google_cse_api_key", None)
        monkeypatch.setattr(settings, "google_cse_cx", None)
        monkeypatch.setattr(settings, "tavily_api_key", "tv")
        providers = get_providers(httpx.AsyncClient())
        assert [p.name for p in providers] == ["tavily"]

        monkeypatch.setattr(settings, "google_cse_api_key", "k")
        monkeypatch.setattr(settings, "google_cse_cx", "cx")
        assert [p.name for p in get_providers(httpx.AsyncClient())] == ["google_cse", "tavily"]
