import asyncio
import logging
from typing import AsyncIterator

from openai import OpenAIError

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult, Language
from jobscout.services.errors import SummarizationFailure
from jobscout.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

MAX_SOURCES = 6

SYSTEM_PROMPTS = {
    "en": (
        "You are a Kuwait job search assistant. Summarize concisely with bullet points and NO URLs. "
        "Base only on the numbered sources. No CV advice; do not invent jobs."
    ),
    "ar": (
        "أنت مساعد للوظائف في الكويت. لخّص النتائج بإيجاز وبنقاط واضحة دون روابط. "
        "اعتمد فقط على المصادر المرقّمة. لا تُنشئ وظائف غير موجودة ولا نصائح سيرة ذاتية."
    ),
}

_USER_LABELS = {
    "en": ("Query:", "Sources (numbered, no links):", "Do not include any URLs; reference items as [1], [2], ..."),
    "ar": ("استعلام:", "مصادر (مرقّمة دون روابط):", "رجاءً لا تضع أي روابط واذكر العناصر كـ [1] [2]..."),
}

NO_RESULTS_MESSAGES = {
    "en": (
        "No recent jobs found matching your search in Kuwait. Try:\n"
        "• A different job title (software engineer, IT support, data analyst)\n"
        "• Adding keywords like: junior, entry level, remote, part-time\n"
        "• Searching again later for new postings"
    ),
    "ar": (
        "لم أجد وظائف حديثة مطابقة في الكويت. جرّب:\n"
        "• تحديد مسمى وظيفي آخر (مهندس برمجيات، دعم فني، محلل بيانات)\n"
        "• إضافة كلمات مثل: حديث التخرج، دوام جزئي، عن بُعد\n"
        "• البحث مرة أخرى لاحقاً للوظائف الجديدة"
    ),
}


def no_results_message(lang: Language) -> str:
    return NO_RESULTS_MESSAGES[lang]


def build_user_prompt(query: str, results: list[JobResult], lang: Language) -> str:
    query_label, sources_label, instruction = _USER_LABELS[lang]
    sources = "\n".join(
        f"{i}. {r.title} — {r.source}" for i, r in enumerate(results[:MAX_SOURCES], start=1)
    )
    return "\n\n".join([f"{query_label} {query}", f"{sources_label}\n{sources}", instruction])


class Summarizer:
    """Short bullet summary of the top results, blocking or token by token."""

    def __init__(self, llm: LLMClient | None):
        self.llm = llm

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    async def _complete(self, query: str, results: list[JobResult], lang: Language) -> str:
        try:
            return await asyncio.wait_for(
                self.llm.complete(SYSTEM_PROMPTS[lang], build_user_prompt(query, results, lang)),
                timeout=settings.llm_timeout_seconds,
            )
        except (OpenAIError, asyncio.TimeoutError) as exc:
            raise SummarizationFailure(repr(exc)) from exc

    async def summarize(self, query: str, results: list[JobResult], lang: Language) -> str | None:
        if not self.enabled or not results:
            return None
        try:
            return await self._complete(query, results, lang) or None
        except SummarizationFailure as exc:
            logger.warning("Summary failed: %s", exc)
            return None

    async def stream(self, query: str, results: list[JobResult], lang: Language) -> AsyncIterator[str]:
        """Yields summary chunks as they arrive; stops quietly if the model call fails."""
        if not self.enabled or not results:
            return
        try:
            async for chunk in self.llm.stream(SYSTEM_PROMPTS[lang], build_user_prompt(query, results, lang)):
                yield chunk
        except OpenAIError as exc:
            logger.warning("Summary stream failed: %r", exc)
