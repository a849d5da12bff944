"""
Heuristic field extraction for job postings.

Every extractor is an ordered table of (pattern, extractor) rules evaluated
top to bottom; the first rule producing a value wins. Tables are kept separate
so each rule can be read and tested on its own.
"""
import re
from dataclasses import dataclass
from typing import Callable

from bs4 import BeautifulSoup

from jobscout.schemas.job_search import JobResult
from jobscout.utils.text import collapse_whitespace

Extractor = Callable[[re.Match], str | None]


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: re.Pattern
    extract: Extractor
    max_length: int | None = None

    def apply(self, text: str) -> str | None:
        m = self.pattern.search(text)
        if not m:
            return None
        value = self.extract(m)
        if value and self.max_length is not None and len(value) > self.max_length:
            return None
        return value


def first_match(rules: list[Rule], text: str) -> str | None:
    for rule in rules:
        value = rule.apply(text)
        if value:
            return value
    return None


def _group(index: int) -> Extractor:
    def extract(m: re.Match) -> str | None:
        return collapse_whitespace(m.group(index))
    return extract


def _label(value: str) -> Extractor:
    return lambda m: value


# ---------------------------------------------------------------------------
# Company and location
# ---------------------------------------------------------------------------

_COMPANY_NOISE = re.compile(
    r"^(bayt|linkedin|jobs?|careers?|kuwait|الكويت|\d{4}|oct|sep|nov|dec|jan|feb|mar|apr|may|jun|jul|aug"
    r"|summary|apply|hiring)",
    re.I,
)
_SNIPPET_COMPANY_NOISE = re.compile(r"^(kuwait|الكويت|bayt|linkedin)", re.I)


def _title_suffix_company(m: re.Match) -> str | None:
    candidate = m.group(1).strip()
    if 2 < len(candidate) < 60 and not _COMPANY_NOISE.match(candidate):
        return candidate
    return None


def _title_at_company(m: re.Match) -> str | None:
    candidate = m.group(1).strip()
    if 2 < len(candidate) < 60:
        return candidate
    return None


def _snippet_company(m: re.Match) -> str | None:
    candidate = m.group(1).strip().rstrip(".,")
    if len(candidate) < 3 or len(candidate) > 50 or _SNIPPET_COMPANY_NOISE.match(candidate):
        return None
    return candidate


TITLE_COMPANY_RULES = [
    # "Accountant - Acme Trading | Bayt.com"
    Rule("title_suffix", re.compile(r"\s[-–—]\s*([^-–—|(]+?)(?:\s*[-–—|]|\s*\(|$)"), _title_suffix_company),
    # "Accountant at Acme Trading"
    Rule("title_at", re.compile(r"\bat\s+([A-Z][\w\s&.,'-]+?)(?:\s*[-–—|]|\s*\(|$)"), _title_at_company),
]

SNIPPET_COMPANY_RULES = [
    # "... join Acme Trading in Kuwait City"
    Rule(
        "snippet_title_case",
        re.compile(r"\b(?i:at|for|with|join)\s+([A-Z][A-Za-z&.,'-]*(?:\s+[A-Z][A-Za-z&.,'-]*)*)"),
        _snippet_company,
    ),
]

LOCATION_RULES = [
    Rule(
        "gazetteer",
        re.compile(r"\b(Kuwait City|Hawali|Salmiya|Farwaniya|Kuwait|مدينة الكويت|الكويت|حولي|السالمية)\b", re.I),
        _group(1),
    ),
]


def extract_company_and_location(title: str, snippet: str) -> tuple[str | None, str | None]:
    company = first_match(TITLE_COMPANY_RULES, title)
    if not company and snippet:
        company = first_match(SNIPPET_COMPANY_RULES, snippet)
    location = first_match(LOCATION_RULES, f"{title} {snippet}")
    return company, location


# ---------------------------------------------------------------------------
# Posting metadata: salary, employment type, posted date
# ---------------------------------------------------------------------------

_NUM = r"[0-9]{1,3}(?:,[0-9]{3})*(?:\.[0-9]+)?"
_CURRENCY = r"(?:\bkwd\b|\bkd\b|دينار)"
_PERIOD = r"(?:month|year|week|hour|annum|شهري|سنوي)"

SALARY_RULES = [
    Rule("labelled", re.compile(r"(salary[^:]{0,15}[:\-]?\s*)([^.;\n]+)", re.I), _group(2), max_length=80),
    Rule(
        "currency_first",
        re.compile(rf"{_CURRENCY}\s*{_NUM}(?:\s*(?:-|to)\s*{_NUM})?(?:\s*(?:per|/)?\s*{_PERIOD})?", re.I),
        _group(0),
        max_length=80,
    ),
    Rule(
        "currency_last",
        re.compile(rf"{_NUM}(?:\s*(?:-|to)\s*{_NUM})?\s*{_CURRENCY}", re.I),
        _group(0),
        max_length=80,
    ),
]

EMPLOYMENT_TYPE_RULES = [
    Rule("full_time", re.compile(r"full[\s-]?time", re.I), _label("Full-time")),
    Rule("part_time", re.compile(r"part[\s-]?time", re.I), _label("Part-time")),
    Rule("contract", re.compile(r"contract", re.I), _label("Contract")),
    Rule("temporary", re.compile(r"temporary", re.I), _label("Temporary")),
    Rule("internship", re.compile(r"\bintern(?:ship)?s?\b", re.I), _label("Internship")),
    Rule("remote", re.compile(r"\bremote\b", re.I), _label("Remote")),
    Rule("hybrid", re.compile(r"hybrid", re.I), _label("Hybrid")),
    Rule("on_site", re.compile(r"on[-\s]?site", re.I), _label("On-site")),
    Rule("ar_full_time", re.compile(r"دوام\s+كامل"), _label("دوام كامل")),
    Rule("ar_part_time", re.compile(r"دوام\s+جزئي"), _label("دوام جزئي")),
    Rule("ar_contract", re.compile(r"عقد"), _label("عقد")),
    Rule("ar_internship", re.compile(r"تدريب"), _label("تدريب")),
]

POSTED_AT_RULES = [
    Rule("posted_on", re.compile(r"posted\s+(?:on\s+)?([A-Z][a-z]+\s+\d{1,2},?\s+\d{4})", re.I), _group(1), max_length=60),
    Rule("posted_ago", re.compile(r"posted\s+(\d+\s+(?:hour|day|week|month|year)s?\s+ago)", re.I), _group(1), max_length=60),
    Rule("date_posted", re.compile(r"date\s+posted\s*[:\-]\s*([A-Z][a-z]+\s+\d{1,2},?\s+\d{4})", re.I), _group(1), max_length=60),
    Rule("ar_posted_on", re.compile(r"تم\s+النشر\s+في\s+([0-9]{1,2}\s+\S+\s+\d{4})"), _group(1), max_length=60),
    Rule("ar_posted_ago", re.compile(r"منذ\s+(\d+\s+يوم(?:اً)?|\d+\s+ساعة|\d+\s+أسبوع)"), _group(1), max_length=60),
]


def extract_metadata(text: str | None) -> dict[str, str]:
    """Pull salary, employment type and posted date out of free text.

    Returns only the keys that were found, named after ``JobResult`` fields.
    """
    normalized = collapse_whitespace(text)
    if not normalized:
        return {}
    found: dict[str, str] = {}

    salary = first_match(SALARY_RULES, normalized)
    if not salary:
        idx = normalized.lower().find("salary")
        if idx != -1:
            salary = collapse_whitespace(normalized[idx:idx + 80])
    if salary:
        found["salary"] = salary

    employment_type = first_match(EMPLOYMENT_TYPE_RULES, normalized)
    if employment_type:
        found["employment_type"] = employment_type

    posted_at = first_match(POSTED_AT_RULES, normalized)
    if posted_at:
        found["posted_at"] = posted_at

    return found


def html_to_text(html: str, max_chars: int) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for node in soup(["script", "style", "noscript"]):
        node.decompose()
    text = soup.get_text(" ", strip=True)
    return text[:max_chars]


_NOISE = re.compile(r"not specified|غير مذكور|محجوب", re.I)


def _sanitize(value: str | None) -> str | None:
    if not value:
        return value
    return collapse_whitespace(_NOISE.sub("", value))


def trim_noise(hit: JobResult) -> JobResult:
    return hit.model_copy(update={
        "salary": _sanitize(hit.salary),
        "employment_type": _sanitize(hit.employment_type),
        "posted_at": _sanitize(hit.posted_at),
    })
