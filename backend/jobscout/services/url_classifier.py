"""
Decides which search hits point at genuine job postings.

Only a handful of job boards are trusted. For each of them a small table of
path rules separates single-posting detail pages from search/category listing
pages; listing pages are let through only when the caller widens the net.
"""
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from jobscout.utils.text import host_of

REJECTED_HOST = "whatjobs.com"

HOST_PRIORITY = {
    "bayt.com": 0,
    "linkedin.com": 1,
    "kw.linkedin.com": 1,
    "indeed.com": 2,
    "kw.indeed.com": 2,
    "indeed.com.kw": 2,
}
UNKNOWN_HOST_PRIORITY = 5

LISTING_TITLE_PATTERNS = [
    re.compile(r"^\d+\+?\s+(?:[\w&/.-]+\s+){0,4}(?:jobs?|positions?|vacancies)\b", re.I),  # "100+ Software Engineer Jobs"
    re.compile(r"^\w+\s+jobs?\s+in\s+kuwait", re.I),  # "Marketing Jobs in Kuwait"
    re.compile(r"^(?:entry level|fresh graduate|remote|part time|full time|international|span)\s+\w+\s+jobs?", re.I),
    re.compile(r"jobs?.*\(\w{3}\s+\d{4}\)", re.I),  # "Marketing Jobs (Oct 2025)"
    re.compile(r"^apply now to", re.I),
    re.compile(r"^today'?s top", re.I),
]

CLOSED_POSTING = re.compile(
    r"job closed|position closed|role closed|applications closed|posting closed|no longer accepting"
    r"|no longer available|posting expired|job expired|applications are closed"
)


@dataclass(frozen=True)
class HostRule:
    name: str
    hosts: tuple[str, ...]
    detail_paths: tuple[re.Pattern, ...]
    listing_paths: tuple[re.Pattern, ...]
    include_subdomains: bool = False
    any_path_when_widened: bool = False

    def matches(self, host: str) -> bool:
        if host in self.hosts:
            return True
        return self.include_subdomains and any(host.endswith("." + h) for h in self.hosts)

    def accepts(self, path: str, allow_listings: bool) -> bool:
        if any(p.search(path) for p in self.detail_paths):
            return True
        if not allow_listings:
            return False
        if self.any_path_when_widened:
            return True
        return any(p.search(path) for p in self.listing_paths)


# Paths are matched lower-cased.
HOST_RULES = [
    HostRule(
        name="bayt",
        hosts=("bayt.com",),
        detail_paths=(re.compile(r"/job/"), re.compile(r"/jobs/[a-z0-9-]+-jobs/")),
        listing_paths=(),
        include_subdomains=True,
        any_path_when_widened=True,
    ),
    HostRule(
        name="linkedin",
        hosts=("linkedin.com", "kw.linkedin.com"),
        detail_paths=(re.compile(r"/jobs/view/"), re.compile(r"/jobs/collections/")),
        listing_paths=(
            re.compile(r"^/jobs/search"),
            re.compile(r"^/jobs/jobs-in-"),
            re.compile(r"^/jobs/[a-z0-9-]+-jobs"),
        ),
    ),
    HostRule(
        name="indeed",
        hosts=("indeed.com", "kw.indeed.com", "indeed.com.kw"),
        detail_paths=(re.compile(r"/viewjob"), re.compile(r"/pagead/"), re.compile(r"/rc/clk")),
        listing_paths=(
            re.compile(r"^/jobs"),
            re.compile(r"^/m/jobs"),
            re.compile(r"/jobs/"),
            re.compile(r"-jobs$"),
            re.compile(r"-jobs\.html$"),
            re.compile(r"^/q-.*-jobs"),
        ),
    ),
]


def host_rule_for(host: str) -> HostRule | None:
    for rule in HOST_RULES:
        if rule.matches(host):
            return rule
    return None


def is_rejected_host(host: str) -> bool:
    return host == REJECTED_HOST or host.endswith("." + REJECTED_HOST)


def classify(url: str, allow_listings: bool = False) -> bool:
    """True when ``url`` is an acceptable posting page on a trusted job board."""
    host = host_of(url)
    if not host or is_rejected_host(host):
        return False
    rule = host_rule_for(host)
    if rule is None:
        return False
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False
    return rule.accepts(path, allow_listings)


def is_listing_page(title: str) -> bool:
    return any(p.search(title) for p in LISTING_TITLE_PATTERNS)


def is_closed_posting(title: str, snippet: str | None) -> bool:
    text = f"{title} {snippet or ''}".lower()
    return bool(CLOSED_POSTING.search(text))


def host_priority(url: str) -> int:
    host = host_of(url)
    if host is None:
        return UNKNOWN_HOST_PRIORITY
    if host in HOST_PRIORITY:
        return HOST_PRIORITY[host]
    # Subdomains of a board share its priority.
    rule = host_rule_for(host)
    if rule is not None and rule.include_subdomains:
        return HOST_PRIORITY.get(rule.hosts[0], UNKNOWN_HOST_PRIORITY)
    return UNKNOWN_HOST_PRIORITY
