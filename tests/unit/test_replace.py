"""Unit tests for replace planning, execution, undo and confirm-each."""

import dataclasses
import re
from pathlib import Path

import pytest

from llm_replace.cancellation import CancellationToken
from llm_replace.config.schema import RiskConfig
from llm_replace.exceptions import (
    InvalidRuleError,
    OverlappingSpansError,
    ReplaceError,
    SubstitutionError,
)
from llm_replace.replace import (
    ConfirmEachSession,
    FileChange,
    PlannedEdit,
    Preview,
    ReplaceExecutor,
    ReplaceOptions,
    ReplacePlanner,
    ReplaceRule,
    RiskLevel,
)
from llm_replace.replace.backup import BackupStore
from llm_replace.replace.diff import create_diff, diff_info
from llm_replace.replace.edits import apply_edits, validate_edits
from llm_replace.replace.executor import failed_results
from llm_replace.replace.models import DiffType, LineChange, LineChangeType
from llm_replace.replace.risk import assess_risk
from llm_replace.replace.substitution import expand_template, preserve_case
from llm_replace.search import InMemoryCorpus, MatchMode, SearchEngine, SearchResult
from llm_replace.search.models import MatchSpan
from llm_replace.search.scanner import SourceText


def find(corpus: InMemoryCorpus, rule: ReplaceRule) -> list[SearchResult]:
    """Run the rule's search query over a corpus."""
    return SearchEngine(corpus).search(rule.to_search_query()).results


def plan(corpus: InMemoryCorpus, rule: ReplaceRule) -> Preview:
    return ReplacePlanner(corpus).plan(rule, find(corpus, rule))


def make_edit(text: str, start: int, end: int, new_text: str, path: str = "f.txt") -> PlannedEdit:
    return PlannedEdit(
        span=SourceText(path, text).span(start, end),
        old_text=text[start:end],
        new_text=new_text,
    )


def mixed_capture_plan() -> tuple[InMemoryCorpus, Preview]:
    """Plan ``(foo)`` -> ``$1x`` over a.py, b.py, c.py where b.py lost its groups."""
    corpus = InMemoryCorpus({"a.py": "foo\n", "b.py": "foo foo\n", "c.py": "x = foo\n"})
    rule = ReplaceRule("(foo)", "$1x", mode=MatchMode.REGEX, options=ReplaceOptions(regex=True))
    results = [
        dataclasses.replace(r, groups=()) if r.file == "b.py" else r for r in find(corpus, rule)
    ]
    return corpus, ReplacePlanner(corpus).plan(rule, results)


def dummy_change(path: str, count: int) -> FileChange:
    """A file change with ``count`` one-character edits."""
    edits = [
        PlannedEdit(
            span=MatchSpan(path, i, i + 1, 1, i + 1, 1, i + 2),
            old_text="x",
            new_text="y",
        )
        for i in range(count)
    ]
    return FileChange(file=path, match_count=count, edits=edits)


class TestSubstitution:
    """Tests for replacement templates and case preservation."""

    def test_numbered_groups(self) -> None:
        assert expand_template("$2-$1", "ab", ("a", "b")) == "b-a"
        assert expand_template("${2}x", "ab", ("a", "b")) == "bx"

    def test_named_groups(self) -> None:
        result = expand_template("<${word}>", "hi", ("hi",), {"word": "hi"})
        assert result == "<hi>"

    def test_whole_match_and_dollar(self) -> None:
        """Test $& and $0 insert the match and $$ a literal dollar."""
        assert expand_template("[$&|$0] $$5", "abc") == "[abc|abc] $5"

    def test_unmatched_group_is_empty(self) -> None:
        assert expand_template("a$1b", "x", (None,)) == "ab"

    def test_two_digit_fallback(self) -> None:
        """Test $10 with one group reads as $1 followed by a literal 0."""
        assert expand_template("$10", "x", ("g",)) == "g0"

    def test_missing_group_raises(self) -> None:
        with pytest.raises(SubstitutionError, match="out of range"):
            expand_template("$3", "ab", ("a", "b"))

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(SubstitutionError):
            expand_template("${nope}", "x", (), {})

    @pytest.mark.parametrize(
        ("original", "replacement", "expected"),
        [
            ("FOO", "bar", "BAR"),
            ("foo", "Bar", "bar"),
            ("Foo", "bar", "Bar"),
            ("fOo", "bar", "bar"),
            ("123", "bar", "bar"),
        ],
    )
    def test_preserve_case(self, original: str, replacement: str, expected: str) -> None:
        assert preserve_case(original, replacement) == expected


class TestEdits:
    """Tests for applying edits to text."""

    def test_apply_tracks_new_offsets(self) -> None:
        """Test later edits land correctly after earlier length changes."""
        text = "hello world"
        edits = [make_edit(text, 0, 5, "HI"), make_edit(text, 6, 11, "there")]

        new_text, applied = apply_edits(text, edits)

        assert new_text == "HI there"
        assert applied == [(0, 2), (3, 8)]
        for (start, end), edit in zip(applied, edits):
            assert new_text[start:end] == edit.new_text

    def test_overlapping_edits_rejected(self) -> None:
        text = "abcdef"
        with pytest.raises(OverlappingSpansError):
            apply_edits(text, [make_edit(text, 0, 3, "x"), make_edit(text, 2, 4, "y")])

    def test_unsorted_edits_rejected(self) -> None:
        text = "abcdef"
        with pytest.raises(OverlappingSpansError):
            validate_edits([make_edit(text, 4, 5, "x"), make_edit(text, 0, 1, "y")])

    def test_mixed_files_rejected(self) -> None:
        text = "abcdef"
        with pytest.raises(OverlappingSpansError, match="mixes files"):
            validate_edits(
                [make_edit(text, 0, 1, "x", "a.txt"), make_edit(text, 2, 3, "y", "b.txt")]
            )


class TestDiff:
    """Tests for unified diffs and structured line changes."""

    def test_unified_diff(self) -> None:
        diff = create_diff("a\nb\n", "a\nc\n", "f.txt")
        assert "--- a/f.txt" in diff
        assert "+++ b/f.txt" in diff
        assert "-b" in diff
        assert "+c" in diff

    def test_equal_content_has_no_diff(self) -> None:
        assert create_diff("same\n", "same\n") == ""

    def test_diff_info_modification(self) -> None:
        info = diff_info("a\nb\n", "a\nc\n")
        assert info.type == DiffType.MODIFICATION
        assert (info.start_line, info.end_line) == (2, 2)
        assert info.changes == [
            LineChange(2, LineChangeType.REMOVED, "b"),
            LineChange(2, LineChangeType.ADDED, "c"),
        ]

    def test_diff_info_deletion(self) -> None:
        info = diff_info("a\nb\nc\n", "a\nc\n")
        assert info.type == DiffType.DELETION
        assert info.old_text == "b"


class TestRisk:
    """Tests for replace risk classification."""

    def test_single_edit_is_low(self) -> None:
        assert assess_risk([dummy_change("a.py", 1)], "x", RiskConfig()) == RiskLevel.LOW

    def test_many_matches_in_one_file_is_high(self) -> None:
        assert assess_risk([dummy_change("a.py", 21)], "x", RiskConfig()) == RiskLevel.HIGH

    def test_empty_replacement_across_files_is_high(self) -> None:
        changes = [dummy_change(f"f{i}.py", 1) for i in range(6)]
        assert assess_risk(changes, "", RiskConfig()) == RiskLevel.HIGH

    def test_sensitive_file_is_medium(self) -> None:
        changes = [dummy_change("pyproject.toml", 1)]
        assert assess_risk(changes, "x", RiskConfig()) == RiskLevel.MEDIUM

    def test_many_total_matches_is_medium(self) -> None:
        changes = [dummy_change(f"f{i}.py", 20) for i in range(3)]
        assert assess_risk(changes, "x", RiskConfig()) == RiskLevel.MEDIUM

    def test_many_files_is_medium(self) -> None:
        changes = [dummy_change(f"f{i}.py", 1) for i in range(11)]
        assert assess_risk(changes, "x", RiskConfig()) == RiskLevel.MEDIUM

    def test_nothing_to_change_is_low(self) -> None:
        assert assess_risk([], "", RiskConfig()) == RiskLevel.LOW


class TestReplacePlanner:
    """Tests for computing previews."""

    def test_preview_counts_and_diffs(self, memory_corpus: InMemoryCorpus) -> None:
        """Test a preview covers every match and leaves files untouched."""
        before = dict(memory_corpus.files)
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))

        assert preview.total_matches == 6
        assert preview.total_files == 3
        assert [c.file for c in preview.per_file_changes] == ["a.py", "b.py", "docs/guide.md"]
        assert preview.risk_level == RiskLevel.MEDIUM
        a_change = preview.per_file_changes[0]
        assert "-foo bar foo" in a_change.diff_preview
        assert "+baz bar baz" in a_change.diff_preview
        assert a_change.lines == [1]
        assert memory_corpus.files == before

    def test_preview_is_deterministic(self, memory_corpus: InMemoryCorpus) -> None:
        """Test planning twice over unchanged files yields the same preview."""
        rule = ReplaceRule("foo", "baz")
        first = plan(memory_corpus, rule)
        second = plan(memory_corpus, rule)

        assert first.id == second.id
        assert first.to_dict() == second.to_dict()

    def test_max_replacements_limits_and_warns(self, memory_corpus: InMemoryCorpus) -> None:
        rule = ReplaceRule("foo", "baz", options=ReplaceOptions(max_replacements=2))
        preview = plan(memory_corpus, rule)

        assert preview.total_matches == 2
        assert [c.file for c in preview.per_file_changes] == ["a.py"]
        assert any("Limited to 2 of 6" in w for w in preview.warnings)

    def test_empty_replacement_warns(self, memory_corpus: InMemoryCorpus) -> None:
        preview = plan(memory_corpus, ReplaceRule("foo", ""))
        assert any("Replacement is empty" in w for w in preview.warnings)

    def test_sensitive_file_warns(self) -> None:
        corpus = InMemoryCorpus({"pyproject.toml": 'name = "foo"\n'})
        preview = plan(corpus, ReplaceRule("foo", "bar"))
        assert preview.risk_level == RiskLevel.MEDIUM
        assert any("Sensitive file" in w for w in preview.warnings)

    def test_noop_edits_are_dropped(self, memory_corpus: InMemoryCorpus) -> None:
        preview = plan(memory_corpus, ReplaceRule("foo", "foo"))
        assert preview.total_matches == 0
        assert preview.applicable_changes == []

    def test_stale_file_is_excluded(self, memory_corpus: InMemoryCorpus) -> None:
        """Test a file edited between search and planning is reported, not planned."""
        rule = ReplaceRule("foo", "baz")
        results = find(memory_corpus, rule)
        memory_corpus.write_file("a.py", "changed content\n")

        preview = ReplacePlanner(memory_corpus).plan(rule, results)

        stale = next(c for c in preview.per_file_changes if c.file == "a.py")
        assert stale.error is not None
        assert "File changed since search" in stale.error
        assert [c.file for c in preview.applicable_changes] == ["b.py", "docs/guide.md"]
        assert any(w.startswith("a.py:") for w in preview.warnings)

    def test_unreadable_file_is_excluded(self, memory_corpus: InMemoryCorpus) -> None:
        rule = ReplaceRule("foo", "baz")
        results = find(memory_corpus, rule)
        del memory_corpus.files["b.py"]

        preview = ReplacePlanner(memory_corpus).plan(rule, results)
        missing = next(c for c in preview.per_file_changes if c.file == "b.py")
        assert missing.error is not None
        assert missing.error.startswith("Unreadable")

    def test_regex_captures(self) -> None:
        corpus = InMemoryCorpus({"c.py": "x = get_value(1)\n"})
        rule = ReplaceRule(r"get_(\w+)", "fetch_$1", mode=MatchMode.REGEX)
        preview = plan(corpus, rule)
        assert preview.per_file_changes[0].edits[0].new_text == "fetch_value"

    def test_bad_template_marks_file(self) -> None:
        corpus = InMemoryCorpus({"c.py": "x = get_value(1)\n"})
        rule = ReplaceRule(r"get_(\w+)", "$2", mode=MatchMode.REGEX)
        preview = plan(corpus, rule)

        change = preview.per_file_changes[0]
        assert change.error is not None
        assert "out of range" in change.error
        assert preview.total_matches == 0

    def test_rejected_file_keeps_its_matches(self) -> None:
        _, preview = mixed_capture_plan()

        rejected = next(c for c in preview.per_file_changes if c.file == "b.py")
        assert rejected.error is not None
        assert rejected.edits == []
        assert [e.span.start_offset for e in rejected.rejected_edits] == [0, 4]
        assert [c.file for c in preview.applicable_changes] == ["a.py", "c.py"]

    def test_empty_query_rejected(self, memory_corpus: InMemoryCorpus) -> None:
        with pytest.raises(InvalidRuleError):
            ReplacePlanner(memory_corpus).plan(ReplaceRule("", "x"), [])


class TestReplaceExecutor:
    """Tests for writing previews."""

    def test_execute_applies_every_edit(self, memory_corpus: InMemoryCorpus) -> None:
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))
        results = ReplaceExecutor(memory_corpus).execute(preview)

        assert len(results) == 6
        assert all(r.success for r in results)
        assert memory_corpus.files["a.py"] == "baz bar baz\n"
        assert memory_corpus.files["b.py"] == "def baz():\n    return 'baz'  # baz\n"
        assert memory_corpus.files["docs/guide.md"] == "Use baz to bar.\n"

    def test_applied_spans_track_length_changes(self) -> None:
        """Test applied spans point at the new text after earlier growth."""
        corpus = InMemoryCorpus({"a.py": "foo bar foo\n"})
        preview = plan(corpus, ReplaceRule("foo", "foobar"))

        results = ReplaceExecutor(corpus).execute(preview)

        assert corpus.files["a.py"] == "foobar bar foobar\n"
        spans = [(r.applied_span.start_offset, r.applied_span.end_offset) for r in results]
        assert spans == [(0, 6), (11, 17)]

    def test_mixed_growth_matches_reference(self) -> None:
        """Test edits that grow, shrink and keep length land where a naive splice puts them."""
        text = "one two three four five six\n"
        replacements = {
            (0, 3): "1",
            (4, 7): "second",
            (8, 13): "",
            (14, 18): "FOUR",
            (24, 27): "sixty-six",
        }
        edits = [
            make_edit(text, start, end, new, "n.txt")
            for (start, end), new in replacements.items()
        ]
        corpus = InMemoryCorpus({"n.txt": text})
        preview = Preview(
            rule=ReplaceRule("x", "y"), per_file_changes=[FileChange(file="n.txt", edits=edits)]
        )

        results = ReplaceExecutor(corpus).execute(preview)

        expected = text
        for (start, end), new in sorted(replacements.items(), reverse=True):
            expected = expected[:start] + new + expected[end:]
        written = corpus.files["n.txt"]
        assert written == expected == "1 second  FOUR five sixty-six\n"
        for result in results:
            applied = result.applied_span
            assert written[applied.start_offset : applied.end_offset] == result.new_text

    def test_regex_rewrite_matches_re_sub(self) -> None:
        text = "a be cat gamma\nhello x\n"
        corpus = InMemoryCorpus({"w.py": text})
        rule = ReplaceRule(r"(\w)(\w*)", "$2$2", mode=MatchMode.REGEX)

        results = ReplaceExecutor(corpus).execute(plan(corpus, rule))

        assert corpus.files["w.py"] == re.sub(r"(\w)(\w*)", r"\2\2", text)
        assert all(r.success for r in results)

    def test_rejected_file_reports_each_match(self) -> None:
        """Test a file the planner rejected fails per match while the others apply."""
        corpus, preview = mixed_capture_plan()

        results = ReplaceExecutor(corpus).execute(preview)

        assert [r.file for r in results] == ["a.py", "b.py", "b.py", "c.py"]
        rejected = [r for r in results if r.file == "b.py"]
        assert all(not r.success and "out of range" in (r.error or "") for r in rejected)
        assert [r.span.start_offset for r in rejected] == [0, 4]
        assert all(r.success for r in results if r.file != "b.py")
        assert corpus.files == {"a.py": "foox\n", "b.py": "foo foo\n", "c.py": "x = foox\n"}

    def test_failed_results_carry_error(self) -> None:
        edits = [make_edit("abc", 0, 1, "x"), make_edit("abc", 2, 3, "y")]

        results = failed_results(edits, "skipped")

        assert [(r.success, r.error, r.old_text) for r in results] == [
            (False, "skipped", "a"),
            (False, "skipped", "c"),
        ]

    def test_preserve_case(self) -> None:
        corpus = InMemoryCorpus({"c.py": "Foo FOO foo\n"})
        rule = ReplaceRule("foo", "bar", options=ReplaceOptions(preserve_case=True))

        ReplaceExecutor(corpus).execute(plan(corpus, rule))
        assert corpus.files["c.py"] == "Bar BAR bar\n"

    def test_stale_file_fails_alone(self, memory_corpus: InMemoryCorpus) -> None:
        """Test a file changed after preview fails without blocking the others."""
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))
        memory_corpus.write_file("a.py", "foo\n")

        results = ReplaceExecutor(memory_corpus).execute(preview)

        failed = [r for r in results if not r.success]
        assert {r.file for r in failed} == {"a.py"}
        assert all(r.error == "File changed since preview" for r in failed)
        assert memory_corpus.files["a.py"] == "foo\n"
        assert memory_corpus.files["docs/guide.md"] == "Use baz to bar.\n"

    def test_write_failure_is_isolated(self, memory_corpus: InMemoryCorpus) -> None:
        class ReadOnlyB(InMemoryCorpus):
            def write_file(self, path: str, text: str) -> None:
                if path == "b.py":
                    raise PermissionError("read-only")
                super().write_file(path, text)

        corpus = ReadOnlyB(memory_corpus.files)
        preview = plan(corpus, ReplaceRule("foo", "baz"))

        results = ReplaceExecutor(corpus).execute(preview)

        assert all(not r.success for r in results if r.file == "b.py")
        assert all(r.success for r in results if r.file != "b.py")
        assert corpus.files["b.py"] == memory_corpus.files["b.py"]
        assert corpus.files["a.py"] == "baz bar baz\n"

    def test_dry_run_cannot_execute(self, memory_corpus: InMemoryCorpus) -> None:
        rule = ReplaceRule("foo", "baz", options=ReplaceOptions(dry_run=True))
        with pytest.raises(InvalidRuleError):
            ReplaceExecutor(memory_corpus).execute(plan(memory_corpus, rule))

    def test_overlapping_edits_write_nothing(self, memory_corpus: InMemoryCorpus) -> None:
        """Test overlap is detected before any file is written."""
        text = memory_corpus.files["a.py"]
        guide = memory_corpus.files["docs/guide.md"]
        good = FileChange(
            file="docs/guide.md", edits=[make_edit(guide, 4, 7, "baz", "docs/guide.md")]
        )
        bad = FileChange(
            file="a.py",
            edits=[make_edit(text, 0, 5, "x", "a.py"), make_edit(text, 3, 7, "y", "a.py")],
        )
        preview = Preview(rule=ReplaceRule("foo", "baz"), per_file_changes=[good, bad])
        before = dict(memory_corpus.files)

        with pytest.raises(OverlappingSpansError):
            ReplaceExecutor(memory_corpus).execute(preview)
        assert memory_corpus.files == before

    def test_cancelled_before_start(self, memory_corpus: InMemoryCorpus) -> None:
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))
        before = dict(memory_corpus.files)
        token = CancellationToken()
        token.cancel()

        results = ReplaceExecutor(memory_corpus).execute(preview, cancel=token)

        assert all(r.error == "cancelled" for r in results)
        assert memory_corpus.files == before

    def test_undo_restores_content(self, memory_corpus: InMemoryCorpus) -> None:
        before = dict(memory_corpus.files)
        executor = ReplaceExecutor(memory_corpus)
        results = executor.execute(plan(memory_corpus, ReplaceRule("foo", "quux")))

        reverted = executor.undo(results)

        assert len(reverted) == 6
        assert all(r.success for r in reverted)
        assert memory_corpus.files == before

    def test_undo_skips_modified_file(self, memory_corpus: InMemoryCorpus) -> None:
        executor = ReplaceExecutor(memory_corpus)
        results = executor.execute(plan(memory_corpus, ReplaceRule("foo", "baz")))
        memory_corpus.write_file("a.py", "rewritten\n")

        reverted = executor.undo(results)

        assert all(not r.success for r in reverted if r.file == "a.py")
        assert memory_corpus.files["a.py"] == "rewritten\n"
        assert memory_corpus.files["docs/guide.md"] == "Use foo to bar.\n"

    def test_backup_and_rollback(self, memory_corpus: InMemoryCorpus, temp_dir: Path) -> None:
        before = dict(memory_corpus.files)
        store = BackupStore(temp_dir / "backups")
        executor = ReplaceExecutor(memory_corpus, backup_store=store)
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))

        backup_id = executor.create_backup(preview)
        executor.execute(preview)
        restored = executor.rollback(backup_id)

        assert sorted(restored) == ["a.py", "b.py", "docs/guide.md"]
        assert memory_corpus.files == before
        backups = store.list_backups()
        assert [b["backup_id"] for b in backups] == [backup_id]
        assert "'foo' -> 'baz'" in backups[0]["description"]

    def test_backup_requires_store(self, memory_corpus: InMemoryCorpus) -> None:
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))
        with pytest.raises(ReplaceError):
            ReplaceExecutor(memory_corpus).create_backup(preview)

    def test_rollback_unknown_backup(self, memory_corpus: InMemoryCorpus, temp_dir: Path) -> None:
        executor = ReplaceExecutor(memory_corpus, backup_store=BackupStore(temp_dir))
        with pytest.raises(ReplaceError, match="Backup not found"):
            executor.rollback("missing")


class TestConfirmEachSession:
    """Tests for one-edit-at-a-time replace."""

    @pytest.fixture
    def session(self, memory_corpus: InMemoryCorpus) -> ConfirmEachSession:
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))
        return ConfirmEachSession(ReplaceExecutor(memory_corpus), preview)

    def test_pending_edits_are_numbered(self, session: ConfirmEachSession) -> None:
        seen = []
        for pending in session:
            seen.append((pending.file, pending.index, pending.total, pending.line_text))
            session.skip()

        assert [s[1] for s in seen] == [1, 2, 3, 4, 5, 6]
        assert all(s[2] == 6 and s[3] == "foo" for s in seen)
        assert session.finished

    def test_approve_all(
        self, session: ConfirmEachSession, memory_corpus: InMemoryCorpus
    ) -> None:
        for _ in session:
            session.approve()

        assert all(r.success for r in session.results)
        assert memory_corpus.files["a.py"] == "baz bar baz\n"

    def test_skip_leaves_text(
        self, session: ConfirmEachSession, memory_corpus: InMemoryCorpus
    ) -> None:
        """Test only approved edits are written."""
        for pending in session:
            if pending.file == "a.py":
                session.approve()
            else:
                session.skip()

        assert memory_corpus.files["a.py"] == "baz bar baz\n"
        assert memory_corpus.files["docs/guide.md"] == "Use foo to bar.\n"
        skipped = [r for r in session.results if not r.success]
        assert len(skipped) == 4
        assert all(r.error == "skipped" for r in skipped)

    def test_abort_commits_approved_edits(
        self, session: ConfirmEachSession, memory_corpus: InMemoryCorpus
    ) -> None:
        """Test abort writes what was approved and marks the rest aborted."""
        for pending in session:
            if pending.index == 1:
                session.approve()
            else:
                session.abort()

        assert session.aborted
        assert memory_corpus.files["a.py"] == "baz bar foo\n"
        assert memory_corpus.files["b.py"].count("foo") == 3
        results = session.results
        assert len(results) == 6
        assert results[0].success
        assert all(r.error == "aborted" for r in results[1:])

    def test_cancel_stops_before_next_file(self, memory_corpus: InMemoryCorpus) -> None:
        """Test files finished before the cancel are written and the rest report cancelled."""
        token = CancellationToken()
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))
        session = ConfirmEachSession(ReplaceExecutor(memory_corpus), preview, cancel=token)

        for pending in session:
            session.approve()
            if pending.index == 3:
                token.cancel()

        assert session.cancelled
        assert memory_corpus.files["a.py"] == "baz bar baz\n"
        assert memory_corpus.files["b.py"].count("foo") == 3
        assert [r.success for r in session.results] == [True, True, False, False, False, False]
        assert all(r.error == "cancelled" for r in session.results[2:])

    def test_cancelled_session_yields_nothing(self, memory_corpus: InMemoryCorpus) -> None:
        before = dict(memory_corpus.files)
        token = CancellationToken()
        token.cancel()
        preview = plan(memory_corpus, ReplaceRule("foo", "baz"))
        session = ConfirmEachSession(ReplaceExecutor(memory_corpus), preview, cancel=token)

        assert list(session) == []
        assert len(session.results) == 6
        assert all(r.error == "cancelled" for r in session.results)
        assert memory_corpus.files == before

    def test_rejected_file_is_reported(self) -> None:
        corpus, preview = mixed_capture_plan()
        session = ConfirmEachSession(ReplaceExecutor(corpus), preview)

        pending_files = []
        for pending in session:
            pending_files.append(pending.file)
            session.approve()

        assert pending_files == ["a.py", "c.py"]
        assert [r.file for r in session.results] == ["a.py", "b.py", "b.py", "c.py"]
        assert [r.success for r in session.results] == [True, False, False, True]
        assert corpus.files["b.py"] == "foo foo\n"

    def test_missing_decision_raises(self, session: ConfirmEachSession) -> None:
        with pytest.raises(ReplaceError, match="No decision"):
            for _ in session:
                pass
