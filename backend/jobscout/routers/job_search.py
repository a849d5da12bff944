import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from jobscout.dependencies import get_pipeline, rate_limited
from jobscout.schemas.job_search import JobSearchError, JobSearchRequest, JobSearchResponse
from jobscout.services.pipeline import JobSearchPipeline, detect_language
from jobscout.services.stream import STREAM_HEADERS, STREAM_MEDIA_TYPE, job_search_events

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assist/job-search", tags=["job-search"])


@router.post(
    "",
    response_model=JobSearchResponse,
    responses={500: {"model": JobSearchError}},
    dependencies=[Depends(rate_limited("job-search-assist"))],
)
async def search_jobs(data: JobSearchRequest, pipeline: JobSearchPipeline = Depends(get_pipeline)):
    query = data.q.strip()
    lang = detect_language(query, data.lang)
    try:
        outcome = await pipeline.run(query, lang, data.session_id)
    except Exception:
        logger.exception("Job search failed for %r", query[:50])
        return JSONResponse(
            status_code=500,
            content=JobSearchError(error="Search failed. Please try again.").model_dump(),
        )

    content = {
        "ok": True,
        "lang": lang,
        "results": [r.model_dump(by_alias=True, exclude_none=True) for r in outcome.results],
        "answer": outcome.answer,
    }
    if outcome.from_cache:
        content["fromCache"] = True
    return JSONResponse(content=content)


@router.post("/stream", dependencies=[Depends(rate_limited("job-search-assist-stream"))])
async def search_jobs_stream(data: JobSearchRequest, pipeline: JobSearchPipeline = Depends(get_pipeline)):
    query = data.q.strip()
    lang = detect_language(query, data.lang)
    return StreamingResponse(
        job_search_events(pipeline, query, lang, data.session_id),
        media_type=STREAM_MEDIA_TYPE,
        headers=STREAM_HEADERS,
    )
