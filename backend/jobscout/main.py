import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobscout.config import settings
from jobscout.database import SessionLocal, init_db
from jobscout.routers import job_search
from jobscout.services.cache import DetailCache, SessionCache
from jobscout.services.enricher import DetailEnricher
from jobscout.services.internal_jobs import InternalJobSearch
from jobscout.services.llm_client import get_llm_client
from jobscout.services.pipeline import JobSearchPipeline
from jobscout.services.providers import get_providers
from jobscout.services.query_expander import QueryExpander
from jobscout.services.rate_limit import RateLimitExceeded
from jobscout.services.summarizer import Summarizer

VERSION = "0.1.0"

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("jobscout")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: job store schema, shared HTTP client, caches and the pipeline
    init_db(settings.db_path)
    http_client = httpx.AsyncClient()
    llm = get_llm_client()
    app.state.pipeline = JobSearchPipeline(
        providers=get_providers(http_client),
        expander=QueryExpander(llm),
        enricher=DetailEnricher(http_client, DetailCache()),
        summarizer=Summarizer(llm),
        session_cache=SessionCache(),
        internal_jobs=InternalJobSearch(SessionLocal),
    )
    logger.info("Job search ready (providers=%d, llm=%s)", len(app.state.pipeline.providers), llm is not None)
    yield
    # Shutdown: release pooled connections
    await http_client.aclose()
    if llm is not None:
        await llm.close()


app = FastAPI(
    title="JobScout",
    description="Job-listing discovery and ranking for Kuwait job seekers",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:3000",
        "http://localhost:3000",
        f"https://{settings.public_app_host}",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests"},
        headers={
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Limit": str(exc.result.limit),
            "X-RateLimit-Remaining": str(exc.result.remaining),
        },
    )


app.include_router(job_search.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION}


def run():
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
