"""Unit tests for the SearchReplaceService facade."""

from pathlib import Path

import pytest

from llm_replace.cancellation import CancellationToken
from llm_replace.config.schema import LLMReplaceConfig
from llm_replace.enrichment import IntentType
from llm_replace.exceptions import InvalidRuleError, SemanticBackendUnavailable
from llm_replace.providers import MockProvider
from llm_replace.replace import (
    ConfirmEachSession,
    OperationStatus,
    Preview,
    ReplaceOptions,
    ReplaceRule,
)
from llm_replace.search import MatchMode, SearchQuery, SemanticStatus
from llm_replace.search.corpus import FileSystemCorpus
from llm_replace.search.models import Region, SearchScope
from llm_replace.service import SearchReplaceService


def snapshot(root: Path) -> dict[str, str]:
    return {
        p.relative_to(root).as_posix(): p.read_text()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class TestSearch:
    """Tests for search through the service."""

    def test_search_records_session(self, service: SearchReplaceService) -> None:
        response = service.search(SearchQuery("old_name"))

        assert response.total == 6
        assert response.files == ["README.md", "main.py", "src/app.py"]
        assert service.session.get_response(response.query.id) is response
        assert service.session.history() == ["old_name"]

    def test_scope_restricts_files(self, service: SearchReplaceService) -> None:
        response = service.search(SearchQuery("old_name", scope=SearchScope.project("src")))
        assert response.files == ["src/app.py"]

    def test_ai_enhanced_attaches_suggestions(self, service: SearchReplaceService) -> None:
        """Test enhanced mode decorates results and reports the missing backend."""
        response = service.search(SearchQuery("old_name", MatchMode.AI_ENHANCED))

        assert response.semantic_status == SemanticStatus.UNAVAILABLE
        in_comment = [r for r in response.results if r.region == Region.COMMENT]
        assert in_comment
        assert all(r.suggestions for r in in_comment)

    def test_index_without_provider(self, service: SearchReplaceService) -> None:
        with pytest.raises(SemanticBackendUnavailable):
            service.index()


class TestReplace:
    """Tests for the one-call replace workflow."""

    def test_replace_completes(self, service: SearchReplaceService, sample_files: Path) -> None:
        """Test a replace rewrites every match and a re-search finds none."""
        operation = service.replace(ReplaceRule("old_name", "new_name"))

        assert operation.status == OperationStatus.COMPLETED
        assert operation.succeeded == 6
        assert operation.failed == 0
        assert operation.duration_ms is not None
        assert service.search(SearchQuery("old_name")).total == 0
        assert "print(new_name())" in (sample_files / "main.py").read_text()
        assert service.session.get_operation(operation.id) is operation

    def test_dry_run_writes_nothing(
        self, service: SearchReplaceService, sample_files: Path
    ) -> None:
        before = snapshot(sample_files)
        rule = ReplaceRule("old_name", "new_name", options=ReplaceOptions(dry_run=True))

        operation = service.replace(rule)

        assert operation.status == OperationStatus.COMPLETED
        assert operation.results == []
        assert operation.preview is not None
        assert operation.preview.total_matches == 6
        assert snapshot(sample_files) == before

    def test_rejected_preview_cancels(
        self, service: SearchReplaceService, sample_files: Path
    ) -> None:
        before = snapshot(sample_files)
        seen: list[Preview] = []

        def approve(preview: Preview) -> bool:
            seen.append(preview)
            return False

        operation = service.replace(ReplaceRule("old_name", "new_name"), approve=approve)

        assert operation.status == OperationStatus.CANCELLED
        assert seen[0].total_files == 3
        assert snapshot(sample_files) == before

    def test_plan_replace_records_preview(self, service: SearchReplaceService) -> None:
        rule = ReplaceRule("old_name", "new_name")
        response = service.search(rule.to_search_query())

        preview = service.plan_replace(rule, response.results)

        assert preview.total_matches == 6
        assert service.session.get_preview(preview.id) is preview

    def test_confirm_each_needs_execute_replace(self, service: SearchReplaceService) -> None:
        rule = ReplaceRule("old_name", "x", options=ReplaceOptions(confirm_each=True))
        with pytest.raises(InvalidRuleError):
            service.replace(rule)

    def test_execute_confirm_each_returns_session(self, service: SearchReplaceService) -> None:
        rule = ReplaceRule("old_name", "x", options=ReplaceOptions(confirm_each=True))
        preview = service.preview_rule(rule)

        session = service.execute_replace(rule, preview)

        assert isinstance(session, ConfirmEachSession)
        for _ in session:
            session.skip()
        assert len(session.results) == 6

    def test_confirm_each_honours_cancel(
        self, service: SearchReplaceService, sample_files: Path
    ) -> None:
        before = snapshot(sample_files)
        rule = ReplaceRule("old_name", "x", options=ReplaceOptions(confirm_each=True))
        preview = service.preview_rule(rule)
        token = CancellationToken()
        token.cancel()

        session = service.execute_replace(rule, preview, cancel=token)

        assert isinstance(session, ConfirmEachSession)
        assert list(session) == []
        assert all(r.error == "cancelled" for r in session.results)
        assert snapshot(sample_files) == before

    def test_execute_rejects_other_rule(self, service: SearchReplaceService) -> None:
        preview = service.preview_rule(ReplaceRule("old_name", "a"))
        with pytest.raises(InvalidRuleError, match="different rule"):
            service.execute_replace(ReplaceRule("old_name", "b"), preview)

    def test_stale_file_between_preview_and_execute(
        self, service: SearchReplaceService, sample_files: Path
    ) -> None:
        rule = ReplaceRule("old_name", "new_name")
        preview = service.preview_rule(rule)
        (sample_files / "README.md").write_text("# Demo\n\nold_name moved.\n")

        results = service.execute_replace(rule, preview)

        assert isinstance(results, list)
        assert all(not r.success for r in results if r.file == "README.md")
        assert all(r.success for r in results if r.file != "README.md")
        assert (sample_files / "README.md").read_text() == "# Demo\n\nold_name moved.\n"

    def test_backup_and_rollback(
        self, service: SearchReplaceService, sample_files: Path, temp_dir: Path
    ) -> None:
        before = snapshot(sample_files)
        rule = ReplaceRule("old_name", "new_name", options=ReplaceOptions(backup=True))

        operation = service.replace(rule)
        assert operation.backup_id is not None
        assert (temp_dir / "backups" / operation.backup_id / "metadata.json").exists()

        restored = service.rollback(operation.backup_id)
        assert sorted(restored) == ["README.md", "main.py", "src/app.py"]
        assert snapshot(sample_files) == before

    def test_undo(self, service: SearchReplaceService, sample_files: Path) -> None:
        before = snapshot(sample_files)
        operation = service.replace(ReplaceRule("old_name", "renamed"))

        reverted = service.undo(operation.results)

        assert all(r.success for r in reverted)
        assert snapshot(sample_files) == before


class TestSemantic:
    """Tests for semantic search and enhancement through the service."""

    def test_semantic_search_without_provider(self, service: SearchReplaceService) -> None:
        report = service.semantic_search("rename old_name")

        assert report.semantic_status == SemanticStatus.UNAVAILABLE
        assert report.results == []
        assert report.intent.type == IntentType.REFACTOR
        assert "Broaden" in report.suggestions[0].text
        assert service.session.get_report(report.id) is report

    def test_semantic_search_with_provider(
        self, sample_files: Path, test_config: LLMReplaceConfig
    ) -> None:
        """Test the index is built on demand and results are explained."""
        service = SearchReplaceService(
            FileSystemCorpus(sample_files), test_config, provider=MockProvider()
        )
        try:
            report = service.semantic_search("old_name is deprecated")

            assert report.semantic_status == SemanticStatus.OK
            assert "main.py" in {r.result.file for r in report.results}
            assert all(r.explanation.startswith("Found") for r in report.results)
            assert report.metrics.quality > 0
            assert service.index_stats()["total_files"] == 4
        finally:
            service.close()

    def test_index_with_provider(self, sample_files: Path, test_config: LLMReplaceConfig) -> None:
        service = SearchReplaceService(
            FileSystemCorpus(sample_files), test_config, provider=MockProvider()
        )
        try:
            stats = service.index()
            assert stats.files_indexed == 4
            assert service.index().files_unchanged == 4
        finally:
            service.close()

    def test_enhance_search(self, service: SearchReplaceService) -> None:
        enhancement = service.enhance_search("old_name")

        assert enhancement.enhanced_query == "old_name"
        assert service.session.get_enhancement(enhancement.id) is enhancement
