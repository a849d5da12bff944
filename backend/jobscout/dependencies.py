from fastapi import Request

from jobscout.config import settings
from jobscout.services.pipeline import JobSearchPipeline
from jobscout.services.rate_limit import FixedWindowRateLimiter

rate_limiter = FixedWindowRateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def rate_limited(namespace: str):
    """Dependency factory: one fixed-window budget per namespace and client IP."""

    async def check_rate_limit(request: Request):
        if not settings.rate_limit_enabled:
            return
        rate_limiter.check(f"rate_limit:{namespace}:{client_ip(request)}")

    return check_rate_limit


def get_pipeline(request: Request) -> JobSearchPipeline:
    return request.app.state.pipeline
