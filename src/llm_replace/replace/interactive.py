"""Cooperative one-edit-at-a-time replace (``confirm_each``)."""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from llm_replace.cancellation import CancellationToken
from llm_replace.exceptions import ReplaceError
from llm_replace.replace.executor import ReplaceExecutor, failed_results
from llm_replace.replace.models import FileChange, PlannedEdit, Preview, ReplaceResult


class Decision(str, Enum):
    """Caller's answer for one pending edit."""

    APPROVE = "approve"
    SKIP = "skip"
    ABORT = "abort"


@dataclass(frozen=True)
class PendingEdit:
    """An edit awaiting a decision."""

    file: str
    edit: PlannedEdit
    index: int
    total: int
    line_text: str


def _unapplied(change: FileChange, reason: str) -> list[ReplaceResult]:
    if change.error:
        return failed_results(change.rejected_edits, change.error)
    return failed_results(change.edits, reason)


class ConfirmEachSession:
    """Yields one pending edit at a time and waits for a decision.

    Usage:
        session = service.execute_replace(rule, preview)
        for pending in session:
            if looks_right(pending):
                session.approve()
            else:
                session.skip()
        results = session.results

    The next edit is only computed after the current one is decided.
    Approved edits are written when the session moves past their file
    (or aborts); skipped edits produce results with error ``skipped``
    and edits never reached after an abort get error ``aborted``. Files
    the planner rejected report their matches with the file's error.
    ``cancel`` is checked before each file; once set, the remaining
    files report ``cancelled``.
    """

    def __init__(
        self,
        executor: ReplaceExecutor,
        preview: Preview,
        cancel: CancellationToken | None = None,
    ) -> None:
        self.executor = executor
        self.preview = preview
        self.cancel = cancel
        self._decision: Decision | None = None
        self._results: list[ReplaceResult] = []
        self._aborted = False
        self._finished = False

    @property
    def results(self) -> list[ReplaceResult]:
        return list(self._results)

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def finished(self) -> bool:
        return self._finished

    def decide(self, decision: Decision) -> None:
        self._decision = Decision(decision)

    def approve(self) -> None:
        self.decide(Decision.APPROVE)

    def skip(self) -> None:
        self.decide(Decision.SKIP)

    def abort(self) -> None:
        self.decide(Decision.ABORT)

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.cancelled

    def __iter__(self) -> Iterator[PendingEdit]:
        changes = [c for c in self.preview.per_file_changes if c.error or c.edits]
        total = sum(len(c.edits) for c in changes if c.ok)
        index = 0

        for file_index, change in enumerate(changes):
            if change.error:
                self._results.extend(failed_results(change.rejected_edits, change.error))
                continue
            if self.cancelled:
                for remaining in changes[file_index:]:
                    self._results.extend(_unapplied(remaining, "cancelled"))
                break

            approved: list[PlannedEdit] = []
            file_results: list[ReplaceResult] = []

            for edit_index, edit in enumerate(change.edits):
                index += 1
                self._decision = None
                yield PendingEdit(
                    file=change.file,
                    edit=edit,
                    index=index,
                    total=total,
                    line_text=edit.old_text,
                )
                if self._decision is None:
                    raise ReplaceError("No decision was made for the pending edit")

                if self._decision == Decision.APPROVE:
                    approved.append(edit)
                elif self._decision == Decision.SKIP:
                    file_results.extend(failed_results([edit], "skipped"))
                else:
                    self._aborted = True
                    file_results.extend(failed_results(change.edits[edit_index:], "aborted"))
                    break

            if approved:
                file_results.extend(
                    self.executor.apply_change(
                        self.executor.subset(change, approved), self.cancel
                    )
                )
            self._results.extend(sorted(file_results, key=lambda r: r.span.start_offset))

            if self._aborted:
                for remaining in changes[file_index + 1 :]:
                    self._results.extend(_unapplied(remaining, "aborted"))
                break

        self._finished = True
