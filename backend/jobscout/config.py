from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    # Logs per-stage pipeline counts at DEBUG level.
    debug_pipeline: bool = False

    data_path: Path = Path.home() / "JobScout"
    public_app_host: str = "wathefni.ai"

    # Search providers. A provider without credentials is skipped.
    google_cse_api_key: str | None = None
    google_cse_cx: str | None = None
    tavily_api_key: str | None = None
    provider_timeout_seconds: float = 10.0

    # Language model used for query cleanup and result summaries.
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 20.0

    location_word_en: str = "Kuwait"
    location_word_ar: str = "الكويت"
    max_queries: int = 7

    session_ttl_seconds: int = 60 * 60  # 1 hour
    detail_ttl_seconds: int = 6 * 60 * 60  # 6 hours
    session_max_results: int = 20

    enrich_max_fetches: int = 5
    enrich_timeout_seconds: float = 10.0
    enrich_max_chars: int = 60_000
    enrich_user_agent: str = "Mozilla/5.0 (compatible; AIJobFinder/1.0; +https://cv-saas.vercel.app)"

    max_results: int = 10
    max_post_age_days: int = 30
    linkedin_max_age_days: int = 14
    recency_bonus_week: int = -2
    recency_bonus_fortnight: int = -1
    relevance_penalty_none: int = 2
    relevance_penalty_partial: int = 1

    rate_limit_enabled: bool = True
    rate_limit_requests: int = 30
    rate_limit_window_seconds: int = 10 * 60

    @property
    def db_path(self) -> Path:
        return self.data_path / "jobs.sqlite"

    model_config = {"env_prefix": "JOBSCOUT_"}


settings = Settings()
