from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Language = Literal["en", "ar"]


class JobResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    url: str
    source: str
    snippet: str = ""
    company: str | None = None
    location: str | None = None
    salary: str | None = None
    employment_type: str | None = None
    posted_at: str | None = None  # free text as published, e.g. "3 days ago"
    is_internal: bool | None = None


class JobSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    q: str = Field(..., min_length=2)
    lang: Language | None = None
    session_id: str | None = Field(None, alias="sessionId", min_length=5, max_length=128)


class JobSearchResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = True
    lang: Language
    results: list[JobResult]
    answer: str | None
    from_cache: bool | None = None


class JobSearchError(BaseModel):
    ok: bool = False
    error: str
