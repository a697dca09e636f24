"""Unit tests for the per-caller session store."""

from llm_replace.enrichment import QueryEnhancer
from llm_replace.replace import ReplaceOperation, ReplacePlanner, ReplaceRule
from llm_replace.search import InMemoryCorpus, SearchEngine, SearchQuery, SearchResponse
from llm_replace.session import SearchSession


def response_for(text: str) -> SearchResponse:
    return SearchResponse(query=SearchQuery(text))


class TestSearchSession:
    """Tests for SearchSession."""

    def test_record_response(self) -> None:
        session = SearchSession()
        response = response_for("foo")

        session.record_response(response)

        assert session.get_response(response.query.id) is response
        assert session.get_query(response.query.id) == response.query
        assert session.get_response("missing") is None

    def test_history_is_oldest_first(self) -> None:
        session = SearchSession()
        for text in ("one", "two", "three"):
            session.record_response(response_for(text))
        assert session.history() == ["one", "two", "three"]

    def test_rerun_moves_query_to_end(self) -> None:
        session = SearchSession()
        for text in ("one", "two", "one"):
            session.record_response(response_for(text))
        assert session.history() == ["two", "one"]

    def test_oldest_entries_evicted(self) -> None:
        """Test the store keeps only the newest max_entries items."""
        session = SearchSession(max_entries=2)
        first = response_for("one")
        for response in (first, response_for("two"), response_for("three")):
            session.record_response(response)

        assert session.history() == ["two", "three"]
        assert session.get_response(first.query.id) is None

    def test_previews_and_operations(self, memory_corpus: InMemoryCorpus) -> None:
        session = SearchSession()
        rule = ReplaceRule("foo", "baz")
        results = SearchEngine(memory_corpus).search(rule.to_search_query()).results
        preview = ReplacePlanner(memory_corpus).plan(rule, results)
        first = ReplaceOperation(rule=rule, id="op-1")
        second = ReplaceOperation(rule=rule, id="op-2")

        session.record_preview(preview)
        session.record_operation(first)
        session.record_operation(second)

        assert session.get_preview(preview.id) is preview
        assert session.get_operation("op-2") is second
        assert session.list_operations() == [first, second]

    def test_enhancements(self) -> None:
        session = SearchSession()
        enhancement = QueryEnhancer().enhance("old_name")

        session.record_enhancement(enhancement)

        assert session.get_enhancement(enhancement.id) is enhancement
        assert session.get_report("missing") is None

    def test_clear(self) -> None:
        session = SearchSession()
        session.record_response(response_for("foo"))
        session.record_operation(ReplaceOperation(rule=ReplaceRule("a", "b"), id="op"))

        session.clear()

        assert session.history() == []
        assert session.list_operations() == []
