import logging

import httpx

from .base import PRIMARY_DOMAINS, PRIMARY_SITE_CLAUSE, SearchProvider
from .google_cse import GoogleCseProvider
from .tavily import TavilyProvider

logger = logging.getLogger(__name__)

__all__ = [
    "SearchProvider", "GoogleCseProvider", "TavilyProvider",
    "PRIMARY_DOMAINS", "PRIMARY_SITE_CLAUSE", "get_providers",
]


def get_providers(client: httpx.AsyncClient) -> list[SearchProvider]:
    """Providers in query order; only those with credentials are registered."""
    providers: list[SearchProvider] = []

    cse = GoogleCseProvider(client)
    if cse.configured:
        providers.append(cse)
        logger.info("Registered search provider: Google Custom Search")

    tavily = TavilyProvider(client)
    if tavily.configured:
        providers.append(tavily)
        logger.info("Registered search provider: Tavily")

    if not providers:
        logger.warning("No search provider credentials configured; external search returns nothing")

    return providers
