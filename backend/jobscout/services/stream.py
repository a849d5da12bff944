"""
Server-sent event framing for the streaming search endpoint.

Frame order for one request: ``results`` once, then zero or more ``token``
frames, then ``done``. Unexpected failures emit ``error`` before ``done``.
"""
import json
import logging
from typing import AsyncIterator

from jobscout.schemas.job_search import JobResult, Language
from jobscout.services.pipeline import JobSearchPipeline
from jobscout.services.summarizer import no_results_message

logger = logging.getLogger(__name__)

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
STREAM_MEDIA_TYPE = "text/event-stream; charset=utf-8"


def format_event(event: str, data) -> str:
    if not isinstance(data, str):
        data = json.dumps(data, ensure_ascii=False)
    # Multi-line payloads become one data line each; clients rejoin them with "\n".
    lines = "".join(f"data: {line}\n" for line in data.split("\n"))
    return f"event: {event}\n{lines}\n"


def results_event(results: list[JobResult]) -> str:
    return format_event("results", [r.model_dump(by_alias=True, exclude_none=True) for r in results])


async def job_search_events(
    pipeline: JobSearchPipeline,
    query: str,
    lang: Language,
    session_id: str | None = None,
) -> AsyncIterator[str]:
    try:
        followup = pipeline.answer_followup(session_id, query, lang)
        if followup:
            yield results_event(followup.results)
            yield format_event("token", followup.answer)
            yield format_event("done", "ok")
            return

        results = await pipeline.search(query, lang)
        pipeline.remember(session_id, results)
        yield results_event(results)

        if results:
            async for chunk in pipeline.summarizer.stream(query, results, lang):
                yield format_event("token", chunk)
        else:
            yield format_event("token", no_results_message(lang))
        yield format_event("done", "ok")
    except Exception:
        logger.exception("Job search stream failed for %r", query[:50])
        yield format_event("error", "search_failed")
        yield format_event("done", "ok")
