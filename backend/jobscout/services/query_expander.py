"""
Turns one user phrase into a bounded set of location-qualified search queries.
"""
import asyncio
import logging
import re
from dataclasses import dataclass, field

from openai import OpenAIError

from jobscout.config import settings
from jobscout.schemas.job_search import Language
from jobscout.services.errors import QueryCleanupFailure
from jobscout.services.llm_client import LLMClient
from jobscout.utils.text import collapse_whitespace

logger = logging.getLogger(__name__)

GENERIC_TOKENS = {
    "job", "jobs", "kuwait", "latest", "hiring", "openings", "opportunities", "in", "now", "today",
    "remote", "full", "part", "time", "fulltime", "parttime", "full-time", "part-time", "opportunity",
    "careers", "career", "vacancy", "vacancies", "role", "roles", "position", "positions",
    "الكويت", "وظائف", "وظيفة",
}

ROLE_VARIANTS = {
    "marketing": ["marketing specialist", "marketing manager", "digital marketing"],
    "software engineer": ["software developer", "software engineering", "backend developer"],
    "software developer": ["software engineer", "backend developer", "full stack developer"],
    "cs internship": ["computer science internship", "software engineering internship", "cs intern"],
    "computer science internship": ["cs internship", "software engineering internship"],
    "it support": ["help desk", "technical support", "desktop support"],
    "data analyst": ["business analyst", "data scientist"],
}

_POSTING_WORDS = re.compile(
    r"\b(jobs?|roles?|positions?|opportunities|vacancies|in|for|remote|near|full[-\s]?time|part[-\s]?time"
    r"|دوام|وظائف|وظيفة)\b",
    re.I,
)
WORD_SPLIT = re.compile("[^a-zA-Z\u0600-\u06ff]+")

MAX_ROLE_TOKENS = 6

_CLEANUP_PROMPTS = {
    "en": (
        'You are a job search assistant. Extract 2-3 optimized search queries from the user request. '
        'Return only JSON: {"queries": ["query1", "query2"]}. No extra text.',
        'User request: "{q}"\n\nExtract clear, specific job search queries '
        '(e.g., "software engineer", "junior accountant", "digital marketing"). Return JSON only.',
    ),
    "ar": (
        'أنت مساعد بحث وظائف. استخرج 2-3 استعلامات بحث مُحسّنة من طلب المستخدم. '
        'أعد JSON فقط بصيغة {"queries": ["استعلام1", "استعلام2"]}. لا تضف نصًا إضافيًا.',
        'طلب المستخدم: "{q}"\n\nاستخرج استعلامات بحث وظائف واضحة ومحددة '
        '(مثل: "مهندس برمجيات"، "محاسب مبتدئ"، "تسويق رقمي"). أعد JSON فقط.',
    ),
}


@dataclass
class ExpandedQuery:
    queries: list[str]
    role_tokens: list[str] = field(default_factory=list)


def location_word(lang: Language) -> str:
    return settings.location_word_ar if lang == "ar" else settings.location_word_en


def role_phrase(query: str, location: str) -> str | None:
    """The bare role left after removing the location and generic posting words."""
    without_location = re.sub(re.escape(location), " ", query, flags=re.I)
    return collapse_whitespace(_POSTING_WORDS.sub(" ", without_location))


def role_variants(role_lower: str, lang: Language) -> list[str]:
    if lang == "ar":
        return []
    variants: list[str] = []
    for key, options in ROLE_VARIANTS.items():
        if re.search(rf"\b{re.escape(key)}\b", role_lower):
            variants.extend(options)
    return variants


def prepare_queries(candidates: list[str], user_input: str, lang: Language, limit: int | None = None) -> list[str]:
    limit = limit or settings.max_queries
    loc = location_word(lang)
    # dict keeps insertion order while deduplicating
    queries: dict[str, None] = {}

    for raw in candidates or [user_input]:
        base = collapse_whitespace(raw)
        if not base:
            continue
        if not re.search(re.escape(loc), base, re.I):
            base = f"{base} {loc}"
        queries[base] = None

        role = role_phrase(base, loc)
        if not role:
            continue

        if lang == "en":
            for template in (
                "{role} job {loc}",
                "{role} jobs in {loc}",
                "{role} opportunities in {loc}",
                "latest {role} jobs in {loc}",
                "{role} hiring now {loc}",
                "{role} openings {loc}",
            ):
                queries[template.format(role=role, loc=loc)] = None
        else:
            queries[f"{role} في {loc}"] = None

        for variant in role_variants(role.lower(), lang):
            queries[f"{variant} {loc}"] = None
            if lang == "en":
                queries[f"{variant} jobs in {loc}"] = None

    return list(queries)[:limit]


def extract_role_tokens(raw_input: str | None, queries: list[str]) -> list[str]:
    tokens: dict[str, None] = {}
    sources = list(queries)
    if raw_input:
        sources.append(raw_input)
    for source in sources:
        for part in WORD_SPLIT.split(source.lower()):
            if len(part) < 3 or part in GENERIC_TOKENS:
                continue
            tokens[part] = None
    return list(tokens)[:MAX_ROLE_TOKENS]


class QueryExpander:
    def __init__(self, llm: LLMClient | None = None):
        self.llm = llm

    async def _clean_queries(self, user_input: str, lang: Language) -> list[str]:
        system, user = _CLEANUP_PROMPTS[lang]
        parsed = await asyncio.wait_for(
            self.llm.complete_json(system, user.replace("{q}", user_input)),
            timeout=settings.llm_timeout_seconds,
        )
        queries = parsed.get("queries")
        if not isinstance(queries, list):
            raise QueryCleanupFailure(f"unexpected payload keys: {sorted(parsed)}")
        return [q for q in queries if isinstance(q, str) and q.strip()]

    async def expand(self, user_input: str, lang: Language) -> ExpandedQuery:
        candidates: list[str] = []
        if self.llm is not None:
            try:
                candidates = await self._clean_queries(user_input, lang)
            except (OpenAIError, asyncio.TimeoutError, ValueError, QueryCleanupFailure) as exc:
                logger.warning("Query cleanup failed, using raw phrase: %s", exc)
        queries = prepare_queries(candidates or [user_input], user_input, lang)
        return ExpandedQuery(queries=queries, role_tokens=extract_role_tokens(user_input, queries))
