import asyncio

from conftest import StubLLM
from jobscout.services.query_expander import (
    QueryExpander,
    extract_role_tokens,
    prepare_queries,
    role_phrase,
    role_variants,
)


class TestPrepareQueries:
    def test_location_appended_and_templates_added(self):
        queries = prepare_queries([], "software engineer", "en")
        assert queries[0] == "software engineer Kuwait"
        assert "software engineer jobs in Kuwait" in queries
        assert all("Kuwait" in q for q in queries)

    def test_capped_at_seven_and_unique(self):
        queries = prepare_queries(["it support", "IT support jobs", "help desk"], "it support", "en")
        assert len(queries) == 7
        assert len(set(queries)) == len(queries)

    def test_location_not_duplicated(self):
        queries = prepare_queries(["accountant jobs in Kuwait"], "accountant jobs in Kuwait", "en")
        assert queries[0] == "accountant jobs in Kuwait"
        assert "accountant job Kuwait" in queries

    def test_arabic(self):
        queries = prepare_queries([], "محاسب", "ar")
        assert queries == ["محاسب الكويت", "محاسب في الكويت"]

    def test_role_variants_for_english_only(self):
        queries = prepare_queries(["it support"], "it support", "en", limit=20)
        assert "help desk Kuwait" in queries
        assert "help desk jobs in Kuwait" in queries
        assert role_variants("it support", "ar") == []

    def test_role_phrase_strips_posting_words(self):
        assert role_phrase("remote marketing jobs in Kuwait", "Kuwait") == "marketing"


class TestRoleTokens:
    def test_generic_words_dropped(self):
        queries = prepare_queries([], "software engineer", "en")
        assert extract_role_tokens("software engineer", queries) == ["software", "engineer"]

    def test_capped_at_six(self):
        tokens = extract_role_tokens("alpha bravo charlie delta echo foxtrot golf hotel", [])
        assert tokens == ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot"]


class TestQueryExpander:
    def test_without_model_uses_raw_phrase(self):
        expanded = asyncio.run(QueryExpander(None).expand("software engineer", "en"))
        assert "software engineer jobs in Kuwait" in expanded.queries
        assert expanded.role_tokens == ["software", "engineer"]

    def test_model_queries_used(self):
        llm = StubLLM(queries=["junior accountant", "accounting assistant"])
        expanded = asyncio.run(QueryExpander(llm).expand("I want an entry accountant role", "en"))
        assert expanded.queries[0] == "junior accountant Kuwait"
        assert "accounting assistant Kuwait" in expanded.queries
        assert '"I want an entry accountant role"' in llm.prompts[0][1]

    def test_model_failure_falls_back(self):
        llm = StubLLM(fail=ValueError("Model returned invalid JSON"))
        expanded = asyncio.run(QueryExpander(llm).expand("data analyst", "en"))
        assert expanded.queries[0] == "data analyst Kuwait"

    def test_wrong_payload_shape_falls_back(self):
        class WrongShape(StubLLM):
            async def complete_json(self, system, user, temperature=0.3, max_tokens=150):
                return {"query": "data analyst"}

        expanded = asyncio.run(QueryExpander(WrongShape()).expand("data analyst", "en"))
        assert expanded.queries[0] == "data analyst Kuwait"

    def test_arabic_prompt(self):
        llm = StubLLM(queries=["محاسب"])
        expanded = asyncio.run(QueryExpander(llm).expand("أبحث عن وظيفة محاسب", "ar"))
        assert llm.prompts[0][0].startswith("أنت مساعد بحث وظائف")
        assert expanded.queries[0] == "محاسب الكويت"
