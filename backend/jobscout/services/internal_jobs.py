import logging
from datetime import datetime, timezone

from dateutil import parser as date_parser
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, sessionmaker

from jobscout.config import settings
from jobscout.models.job import Job
from jobscout.schemas.job_search import JobResult, Language
from jobscout.services.query_expander import GENERIC_TOKENS

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 5
MAX_INTERNAL_RESULTS = 5
SNIPPET_CHARS = 150


def search_keywords(user_input: str) -> list[str]:
    words = [w for w in user_input.lower().split() if len(w) > 2 and w not in GENERIC_TOKENS]
    return words[:MAX_KEYWORDS]


def format_salary(job: Job) -> str | None:
    currency = job.salary_currency or "KWD"
    if job.salary_min and job.salary_max:
        return f"{currency} {job.salary_min}-{job.salary_max}"
    if job.salary_min:
        return f"{currency} {job.salary_min}+"
    return None


def format_posted(created_at: str, lang: Language, now: datetime) -> str | None:
    try:
        created = date_parser.isoparse(created_at)
    except (ValueError, TypeError):
        return None
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    days = int((now - created).total_seconds() // 86400)
    if days <= 0:
        return "اليوم" if lang == "ar" else "Today"
    if days == 1:
        return "أمس" if lang == "ar" else "Yesterday"
    return f"منذ {days} يوم" if lang == "ar" else f"{days} days ago"


def to_job_result(job: Job, lang: Language, now: datetime) -> JobResult:
    return JobResult(
        title=job.title,
        url=f"https://{settings.public_app_host}/jobs/{job.id}",
        source="Wathefni",
        snippet=f"{job.description[:SNIPPET_CHARS]}..." if job.description else "",
        company=job.organization.name if job.organization else None,
        location=job.location or "Kuwait",
        salary=format_salary(job),
        employment_type=job.job_type or job.work_mode or None,
        posted_at=format_posted(job.created_at, lang, now),
        is_internal=True,
    )


class InternalJobSearch:
    """Open postings published on the platform itself, matched by keyword."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _query(self, db: Session, pattern: str) -> list[Job]:
        return (
            db.query(Job)
            .options(joinedload(Job.organization))
            .filter(Job.status == "open")
            .filter(or_(
                Job.title.ilike(pattern),
                Job.description.ilike(pattern),
                Job.department.ilike(pattern),
            ))
            .order_by(Job.created_at.desc())
            .limit(MAX_INTERNAL_RESULTS)
            .all()
        )

    def search(self, user_input: str, lang: Language, now: datetime | None = None) -> list[JobResult]:
        keywords = search_keywords(user_input)
        if not keywords:
            return []
        now = now or datetime.now(timezone.utc)
        pattern = f"%{'%'.join(keywords)}%"
        try:
            with self.session_factory() as db:
                rows = self._query(db, pattern)
                results = [to_job_result(job, lang, now) for job in rows]
        except SQLAlchemyError as exc:
            logger.error("Internal job search failed: %s", exc)
            return []
        if settings.debug_pipeline:
            logger.debug("internal-jobs query=%r found=%d", user_input, len(results))
        return results
