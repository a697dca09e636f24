"""Data model for replace rules, previews, and results."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from llm_replace.search.models import (
    MatchMode,
    MatchSpan,
    SearchOptions,
    SearchQuery,
    SearchScope,
)
from llm_replace.utils.hashing import hash_fields


class RiskLevel(str, Enum):
    """How disruptive a replace is expected to be."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DiffType(str, Enum):
    """Overall shape of a file change."""

    ADDITION = "addition"
    DELETION = "deletion"
    MODIFICATION = "modification"


class LineChangeType(str, Enum):
    """What happened to one line."""

    ADDED = "added"
    REMOVED = "removed"


class OperationStatus(str, Enum):
    """Lifecycle of a replace operation."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ReplaceOptions:
    """Options controlling how matches are rewritten.

    ``regex`` enables ``$1``/``${name}`` substitution in the replacement.
    ``max_replacements`` of None falls back to configuration.
    """

    whole_word: bool = False
    preserve_case: bool = False
    regex: bool = False
    dry_run: bool = False
    max_replacements: int | None = None
    confirm_each: bool = False
    backup: bool = False
    case_sensitive: bool = False
    timeout: float | None = None


@dataclass(frozen=True)
class ReplaceRule:
    """What to find and what to put in its place."""

    query: str
    replacement: str
    mode: MatchMode = MatchMode.EXACT
    options: ReplaceOptions = field(default_factory=ReplaceOptions)

    @property
    def uses_captures(self) -> bool:
        """True when the replacement is a substitution template."""
        return self.options.regex or MatchMode(self.mode) == MatchMode.REGEX

    @property
    def search_mode(self) -> MatchMode:
        return MatchMode.REGEX if self.options.regex else MatchMode(self.mode)

    @property
    def id(self) -> str:
        return hash_fields(
            "rule",
            query=self.query,
            replacement=self.replacement,
            mode=MatchMode(self.mode).value,
            options=asdict(self.options),
        )

    def to_search_query(
        self, scope: SearchScope | None = None, base: SearchOptions | None = None
    ) -> SearchQuery:
        """Build the search query that finds this rule's matches.

        Args:
            scope: Where to search.
            base: Search options to start from (file filters, limits).
        """
        base = base or SearchOptions()
        options = SearchOptions(
            case_sensitive=self.options.case_sensitive,
            whole_word=self.options.whole_word,
            include_comments=base.include_comments,
            include_strings=base.include_strings,
            include_code=base.include_code,
            file_types=base.file_types,
            exclude_patterns=base.exclude_patterns,
            max_results=base.max_results,
            timeout=self.options.timeout if self.options.timeout is not None else base.timeout,
            fuzzy_threshold=base.fuzzy_threshold,
            semantic_top_k=base.semantic_top_k,
        )
        return SearchQuery(
            text=self.query,
            mode=self.search_mode,
            options=options,
            scope=scope or SearchScope(),
        )


@dataclass(frozen=True)
class PlannedEdit:
    """One span rewrite inside a file."""

    span: MatchSpan
    old_text: str
    new_text: str
    groups: tuple[str | None, ...] = ()
    named_groups: dict[str, str | None] = field(default_factory=dict, hash=False)
    result_id: str = ""


@dataclass(frozen=True)
class LineChange:
    """One added or removed line (1-based line number in its version)."""

    line: int
    type: LineChangeType
    content: str


@dataclass
class DiffInfo:
    """Structured description of a file's change."""

    type: DiffType
    old_text: str
    new_text: str
    start_line: int
    end_line: int
    changes: list[LineChange] = field(default_factory=list)


@dataclass
class FileChange:
    """Planned change to one file.

    ``error`` marks a file that is excluded; its matches are kept
    unrendered in ``rejected_edits`` so execution can report each one.
    """

    file: str
    match_count: int = 0
    lines: list[int] = field(default_factory=list)
    diff_preview: str = ""
    diff: DiffInfo | None = None
    risk: RiskLevel = RiskLevel.LOW
    edits: list[PlannedEdit] = field(default_factory=list)
    content_hash: str | None = None
    new_content_hash: str | None = None
    error: str | None = None
    rejected_edits: list[PlannedEdit] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Preview:
    """Everything a replace would do, computed without writing."""

    rule: ReplaceRule
    total_matches: int = 0
    total_files: int = 0
    risk_level: RiskLevel = RiskLevel.LOW
    warnings: list[str] = field(default_factory=list)
    estimated_time_ms: float = 0.0
    per_file_changes: list[FileChange] = field(default_factory=list)

    @property
    def id(self) -> str:
        return hash_fields(
            "p",
            rule=self.rule.id,
            files=[(c.file, c.content_hash, len(c.edits)) for c in self.per_file_changes],
        )

    @property
    def applicable_changes(self) -> list[FileChange]:
        """File changes without errors and with at least one edit."""
        return [c for c in self.per_file_changes if c.ok and c.edits]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "id": self.id,
            "rule": {
                "query": self.rule.query,
                "replacement": self.rule.replacement,
                "mode": MatchMode(self.rule.mode).value,
                "options": asdict(self.rule.options),
            },
            "total_matches": self.total_matches,
            "total_files": self.total_files,
            "risk_level": RiskLevel(self.risk_level).value,
            "warnings": list(self.warnings),
            "estimated_time_ms": round(self.estimated_time_ms, 2),
            "files": [
                {
                    "file": c.file,
                    "match_count": c.match_count,
                    "lines": c.lines,
                    "risk": RiskLevel(c.risk).value,
                    "diff": c.diff_preview,
                    "error": c.error,
                }
                for c in self.per_file_changes
            ],
        }


@dataclass(frozen=True)
class ReplaceResult:
    """Outcome of one attempted edit.

    ``applied_span`` is where the new text sits after the file was written.
    """

    file: str
    span: MatchSpan
    old_text: str
    new_text: str
    success: bool
    error: str | None = None
    applied_span: MatchSpan | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ReplaceOperation:
    """A replace workflow tracked from planning to completion."""

    rule: ReplaceRule
    scope: SearchScope = field(default_factory=SearchScope)
    preview: Preview | None = None
    results: list[ReplaceResult] = field(default_factory=list)
    status: OperationStatus = OperationStatus.PENDING
    error: str | None = None
    backup_id: str | None = None
    created_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = hash_fields("op", rule=self.rule.id, created=self.created_at.isoformat())

    @property
    def duration_ms(self) -> float | None:
        if self.started_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds() * 1000

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def start(self) -> None:
        self.status = OperationStatus.RUNNING
        self.started_at = _now()

    def finish(self, status: OperationStatus, error: str | None = None) -> None:
        self.status = status
        self.error = error
        if self.started_at is None:
            self.started_at = self.created_at
        self.completed_at = _now()
