from dataclasses import dataclass

from jobscout.config import settings
from jobscout.schemas.job_search import JobResult
from jobscout.services.query_expander import GENERIC_TOKENS, WORD_SPLIT


@dataclass(frozen=True)
class RelevancePenalties:
    no_role_token: int = 2
    few_role_tokens: int = 1

    @classmethod
    def from_settings(cls) -> "RelevancePenalties":
        return cls(
            no_role_token=settings.relevance_penalty_none,
            few_role_tokens=settings.relevance_penalty_partial,
        )


def content_tokens(text: str) -> list[str]:
    return [
        t for t in WORD_SPLIT.split(text.lower())
        if len(t) >= 3 and t not in GENERIC_TOKENS
    ]


def relevance_score(query: str, hit: JobResult) -> int:
    """Number of query content words appearing in any of the hit's text fields."""
    fields = [(f or "").lower() for f in (hit.title, hit.company, hit.snippet, hit.location)]
    return sum(1 for token in content_tokens(query) if any(token in f for f in fields))


def role_penalty(hit: JobResult, role_tokens: set[str], penalties: RelevancePenalties) -> int:
    if not role_tokens:
        return 0
    haystack = f"{hit.title} {hit.snippet or ''} {hit.company or ''}".lower()
    hits = sum(1 for token in role_tokens if token in haystack)
    if hits == 0:
        return penalties.no_role_token
    if hits < min(len(role_tokens), 2):
        return penalties.few_role_tokens
    return 0


def apply_relevance_filter(
    query: str,
    hits: list[JobResult],
    role_tokens: list[str],
    penalties: RelevancePenalties | None = None,
) -> list[JobResult]:
    """Keep the hits within one point of the best relevance score.

    When role tokens exist and no hit mentions the role at all, nothing is
    relevant and an empty list is returned.
    """
    if not hits:
        return hits
    penalties = penalties or RelevancePenalties.from_settings()
    tokens = set(role_tokens)
    scored = [
        (hit, max(0, relevance_score(query, hit) - role_penalty(hit, tokens, penalties)))
        for hit in hits
    ]
    max_score = max(score for _, score in scored)
    if max_score == 0:
        return [] if tokens else hits
    threshold = max(1, max_score - 1)
    kept = [hit for hit, score in scored if score >= threshold]
    return kept or hits
