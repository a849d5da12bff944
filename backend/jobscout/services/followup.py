"""Answers detail questions ("what's the salary at Zain?") from the session's last results."""
import re
from dataclasses import dataclass

from jobscout.schemas.job_search import JobResult, Language

MAX_ANSWER_LINES = 5

WANTS_SALARY = re.compile(r"(salary|pay|compensation|راتب|الراتب|أجر)", re.I)
WANTS_EMPLOYMENT = re.compile(r"(employment|contract|full[-\s]?time|part[-\s]?time|دوام|نوع\s+الوظيفة)", re.I)
WANTS_POSTED = re.compile(r"(posted|date|when|متى|تم\s+النشر|منذ)", re.I)
WANTS_LOCATION = re.compile(r"(where|location|city|أين|المكان)", re.I)

LABELS = {
    "en": {
        "header": "Here are the details I have:",
        "salary": "Salary",
        "employment": "Employment",
        "posted": "Posted",
        "location": "Location",
        "no_salary": "Not listed",
        "no_employment": "Not specified",
        "no_posted": "Not available",
        "no_details": "No additional details available.",
    },
    "ar": {
        "header": "إليك التفاصيل المتوفرة:",
        "salary": "الراتب",
        "employment": "نوع العمل",
        "posted": "تاريخ النشر",
        "location": "الموقع",
        "no_salary": "غير مذكور",
        "no_employment": "غير مذكور",
        "no_posted": "غير متوفر",
        "no_details": "لا توجد تفاصيل إضافية.",
    },
}


@dataclass
class FollowUpAnswer:
    answer: str
    results: list[JobResult]


@dataclass
class _Wants:
    salary: bool
    employment: bool
    posted: bool
    location: bool

    @classmethod
    def parse(cls, question: str) -> "_Wants":
        return cls(
            salary=bool(WANTS_SALARY.search(question)),
            employment=bool(WANTS_EMPLOYMENT.search(question)),
            posted=bool(WANTS_POSTED.search(question)),
            location=bool(WANTS_LOCATION.search(question)),
        )

    def any(self) -> bool:
        return self.salary or self.employment or self.posted or self.location

    def satisfied_by(self, hit: JobResult) -> bool:
        return bool(
            (self.salary and hit.salary)
            or (self.employment and hit.employment_type)
            or (self.posted and hit.posted_at)
            or (self.location and hit.location)
        )


def _format_line(hit: JobResult, wants: _Wants, lang: Language) -> str:
    labels = LABELS[lang]
    title = f"{hit.title} — {hit.company}" if hit.company else hit.title
    details = []
    if wants.salary:
        details.append(f"{labels['salary']}: {hit.salary or labels['no_salary']}")
    if wants.employment:
        details.append(f"{labels['employment']}: {hit.employment_type or labels['no_employment']}")
    if wants.posted:
        details.append(f"{labels['posted']}: {hit.posted_at or labels['no_posted']}")
    if wants.location and hit.location:
        details.append(f"{labels['location']}: {hit.location}")
    return f"- {title}: {' • '.join(details) if details else labels['no_details']}"


def answer_from_session(results: list[JobResult] | None, question: str, lang: Language) -> FollowUpAnswer | None:
    """None when the question is not a detail follow-up or nothing cached can answer it."""
    if not results:
        return None
    wants = _Wants.parse(question)
    if not wants.any():
        return None

    lowered = question.lower()
    named = [r for r in results if r.company and r.company.lower() in lowered]
    candidates = [r for r in (named or results) if wants.satisfied_by(r)]
    if not candidates:
        return None

    lines = [_format_line(hit, wants, lang) for hit in candidates[:MAX_ANSWER_LINES]]
    return FollowUpAnswer(answer="\n".join([LABELS[lang]["header"], *lines]), results=candidates)
