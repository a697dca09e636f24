"""Data model for search queries, spans, and results."""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from llm_replace.utils.hashing import hash_fields


class MatchMode(str, Enum):
    """How a query's text is interpreted."""

    EXACT = "exact"
    REGEX = "regex"
    FUZZY = "fuzzy"
    SEMANTIC = "semantic"
    AI_ENHANCED = "ai_enhanced"


class ScopeKind(str, Enum):
    """Which part of the corpus a query covers."""

    WORKSPACE = "workspace"
    PROJECT = "project"
    FILE = "file"
    SELECTION = "selection"


class Region(str, Enum):
    """Lexical region a match starts in."""

    CODE = "code"
    COMMENT = "comment"
    STRING = "string"


class SemanticStatus(str, Enum):
    """Outcome of the semantic backend for one search."""

    OK = "ok"
    UNAVAILABLE = "unavailable"
    NOT_REQUESTED = "not_requested"


class SuggestionType(str, Enum):
    """Kinds of follow-up suggestions attached to results."""

    REPLACEMENT = "replacement"
    REFACTOR = "refactor"
    OPTIMIZATION = "optimization"
    FIX = "fix"
    ENHANCEMENT = "enhancement"


@dataclass(frozen=True)
class Selection:
    """A character range inside one file."""

    file: str
    start_offset: int
    end_offset: int


@dataclass(frozen=True)
class SearchScope:
    """Files and directories a query is restricted to.

    ``workspace`` and ``project`` walk directories (the corpus root when
    none are given), ``file`` lists explicit files, and ``selection``
    restricts matching to one range of one file.
    """

    kind: ScopeKind = ScopeKind.WORKSPACE
    files: tuple[str, ...] = ()
    directories: tuple[str, ...] = ()
    selection: Selection | None = None

    @classmethod
    def workspace(cls) -> "SearchScope":
        return cls()

    @classmethod
    def project(cls, *directories: str) -> "SearchScope":
        return cls(kind=ScopeKind.PROJECT, directories=tuple(directories))

    @classmethod
    def for_files(cls, *files: str) -> "SearchScope":
        return cls(kind=ScopeKind.FILE, files=tuple(files))

    @classmethod
    def for_selection(cls, file: str, start_offset: int, end_offset: int) -> "SearchScope":
        return cls(
            kind=ScopeKind.SELECTION,
            files=(file,),
            selection=Selection(file, start_offset, end_offset),
        )


@dataclass(frozen=True)
class SearchOptions:
    """Options shared by all matchers.

    ``timeout`` is in seconds; None means unbounded. ``fuzzy_threshold``
    and ``semantic_top_k`` fall back to configuration when None.
    """

    case_sensitive: bool = False
    whole_word: bool = False
    include_comments: bool = True
    include_strings: bool = True
    include_code: bool = True
    file_types: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    max_results: int = 100
    timeout: float | None = None
    fuzzy_threshold: float | None = None
    semantic_top_k: int | None = None
    context_lines: int = 0

    @property
    def filters_regions(self) -> bool:
        """True when at least one lexical region is excluded."""
        return not (self.include_comments and self.include_strings and self.include_code)

    def allows(self, region: Region) -> bool:
        if region == Region.COMMENT:
            return self.include_comments
        if region == Region.STRING:
            return self.include_strings
        return self.include_code


@dataclass(frozen=True)
class SearchQuery:
    """An immutable search request."""

    text: str
    mode: MatchMode = MatchMode.EXACT
    options: SearchOptions = field(default_factory=SearchOptions)
    scope: SearchScope = field(default_factory=SearchScope)

    @property
    def id(self) -> str:
        """Deterministic identifier derived from the query content."""
        return hash_fields(
            "q",
            text=self.text,
            mode=MatchMode(self.mode).value,
            options=asdict(self.options),
            scope=asdict(self.scope),
        )

    def with_mode(self, mode: MatchMode) -> "SearchQuery":
        return replace(self, mode=mode)


@dataclass(frozen=True)
class MatchSpan:
    """Location of a match.

    Offsets are 0-based character offsets into the decoded file text,
    end exclusive. Lines and columns are 1-based; ``end_line``/``end_col``
    address the position just past the last matched character.
    """

    file: str
    start_offset: int
    end_offset: int
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset

    def overlaps(self, other: "MatchSpan") -> bool:
        """True if both spans are in the same file and share a character.

        Two empty spans at the same offset also count as overlapping.
        """
        if self.file != other.file:
            return False
        if self.start_offset == other.start_offset:
            return True
        return self.start_offset < other.end_offset and other.start_offset < self.end_offset


@dataclass(frozen=True)
class Capture:
    """One regex capture group, with absolute offsets."""

    group: int
    text: str
    start: int
    end: int
    name: str | None = None


@dataclass(frozen=True)
class Suggestion:
    """Follow-up action proposed for a result or query."""

    type: SuggestionType
    text: str
    description: str = ""
    confidence: float = 0.5
    impact: str = "low"
    effort: str = "low"
    automated: bool = False


@dataclass(frozen=True)
class SearchResult:
    """A single match. Never mutated after creation."""

    file: str
    span: MatchSpan
    matched_text: str
    relevance: float
    confidence: float
    strategy: MatchMode
    suggestions: tuple[Suggestion, ...] = ()
    groups: tuple[str | None, ...] = ()
    named_groups: dict[str, str | None] = field(default_factory=dict, hash=False)
    captures: tuple[Capture, ...] = ()
    context: tuple[str, ...] = ()
    region: Region | None = None
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            object.__setattr__(
                self,
                "id",
                hash_fields(
                    "r",
                    file=self.file,
                    start=self.span.start_offset,
                    end=self.span.end_offset,
                    strategy=MatchMode(self.strategy).value,
                ),
            )

    def with_suggestions(self, suggestions: tuple[Suggestion, ...]) -> "SearchResult":
        return replace(self, suggestions=suggestions)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        data = asdict(self)
        data["strategy"] = MatchMode(self.strategy).value
        data["region"] = Region(self.region).value if self.region else None
        data["suggestions"] = [
            {**asdict(s), "type": SuggestionType(s.type).value} for s in self.suggestions
        ]
        return data


@dataclass(frozen=True)
class FileWarning:
    """A non-fatal problem with one file."""

    file: str
    message: str


@dataclass
class MatchOutcome:
    """What one matcher produced for one query."""

    results: list[SearchResult] = field(default_factory=list)
    warnings: list[FileWarning] = field(default_factory=list)
    backend_status: SemanticStatus = SemanticStatus.NOT_REQUESTED


@dataclass
class SearchResponse:
    """Ranked results plus status metadata for one search."""

    query: SearchQuery
    results: list[SearchResult] = field(default_factory=list)
    warnings: list[FileWarning] = field(default_factory=list)
    truncated: bool = False
    timed_out: bool = False
    cancelled: bool = False
    semantic_status: SemanticStatus = SemanticStatus.NOT_REQUESTED
    files_searched: int = 0
    search_time_ms: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def files(self) -> list[str]:
        """Distinct files with results, in first-seen order."""
        return list(dict.fromkeys(r.file for r in self.results))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "query": {
                "id": self.query.id,
                "text": self.query.text,
                "mode": MatchMode(self.query.mode).value,
            },
            "results": [r.to_dict() for r in self.results],
            "warnings": [asdict(w) for w in self.warnings],
            "truncated": self.truncated,
            "timed_out": self.timed_out,
            "cancelled": self.cancelled,
            "semantic_status": SemanticStatus(self.semantic_status).value,
            "files_searched": self.files_searched,
            "search_time_ms": round(self.search_time_ms, 2),
        }
