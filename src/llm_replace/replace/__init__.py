"""Safe bulk replace: planning, previews, execution, and undo."""

from llm_replace.replace.executor import ReplaceExecutor
from llm_replace.replace.interactive import ConfirmEachSession, Decision, PendingEdit
from llm_replace.replace.models import (
    DiffInfo,
    FileChange,
    LineChange,
    OperationStatus,
    PlannedEdit,
    Preview,
    ReplaceOperation,
    ReplaceOptions,
    ReplaceResult,
    ReplaceRule,
    RiskLevel,
)
from llm_replace.replace.planner import ReplacePlanner

__all__ = [
    "ConfirmEachSession",
    "Decision",
    "DiffInfo",
    "FileChange",
    "LineChange",
    "OperationStatus",
    "PendingEdit",
    "PlannedEdit",
    "Preview",
    "ReplaceExecutor",
    "ReplaceOperation",
    "ReplaceOptions",
    "ReplacePlanner",
    "ReplaceResult",
    "ReplaceRule",
    "RiskLevel",
]
