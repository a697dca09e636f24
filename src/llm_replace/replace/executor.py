"""Replace execution: applies an approved Preview to the corpus."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from llm_replace.cancellation import CancellationToken
from llm_replace.config.schema import ReplaceConfig
from llm_replace.exceptions import InvalidRuleError, ReplaceError
from llm_replace.replace.backup import BackupStore
from llm_replace.replace.edits import apply_edits, validate_edits
from llm_replace.replace.models import FileChange, PlannedEdit, Preview, ReplaceResult
from llm_replace.search.base import FILE_ERRORS
from llm_replace.search.corpus import Corpus
from llm_replace.search.scanner import SourceText
from llm_replace.utils.hashing import hash_content
from llm_replace.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)


def failed_results(edits: list[PlannedEdit], error: str) -> list[ReplaceResult]:
    """One unsuccessful result per edit, all carrying ``error``."""
    return [
        ReplaceResult(
            file=e.span.file,
            span=e.span,
            old_text=e.old_text,
            new_text=e.new_text,
            success=False,
            error=error,
        )
        for e in edits
    ]


class ReplaceExecutor:
    """Writes planned edits file by file.

    Each file is rewritten as a whole (all of its edits or none); a
    failing file never blocks the others. Distinct files are processed
    concurrently; writes to the same path are serialized.
    """

    def __init__(
        self,
        corpus: Corpus,
        config: ReplaceConfig | None = None,
        backup_store: BackupStore | None = None,
    ) -> None:
        self.corpus = corpus
        self.config = config or ReplaceConfig()
        self.backup_store = backup_store
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, path: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(path, threading.Lock())

    def create_backup(self, preview: Preview) -> str:
        """Back up every file a preview would modify.

        Returns:
            Backup ID for ``rollback``.

        Raises:
            ReplaceError: If no backup store is configured or a file
                cannot be read.
        """
        if self.backup_store is None:
            raise ReplaceError("No backup directory configured")
        originals: dict[str, str] = {}
        for change in preview.applicable_changes:
            try:
                originals[change.file] = self.corpus.read_file(change.file)
            except FILE_ERRORS as e:
                raise ReplaceError(f"Cannot back up {change.file}: {e}") from e
        return self.backup_store.create(
            originals, description=f"{preview.rule.query!r} -> {preview.rule.replacement!r}"
        )

    def rollback(self, backup_id: str) -> list[str]:
        """Restore files from a backup.

        Returns:
            Paths restored.
        """
        if self.backup_store is None:
            raise ReplaceError("No backup directory configured")
        restored = self.backup_store.restore(backup_id, self.corpus)
        log_with_context(logger, logging.INFO, "Rolled back backup", backup_id=backup_id, files=len(restored))
        return restored

    def execute(
        self,
        preview: Preview,
        cancel: CancellationToken | None = None,
    ) -> list[ReplaceResult]:
        """Apply a preview.

        Args:
            preview: An approved preview of a non-dry-run rule.
            cancel: Optional token checked before each file.

        Returns:
            One result per edit attempted, grouped by file in preview
            order and by offset within a file. Files the planner rejected
            report each of their matches as failed with the file's error.

        Raises:
            InvalidRuleError: If the preview's rule is a dry run.
            OverlappingSpansError: If any file's edits overlap or are
                unsorted. Checked for every file before anything is written.
        """
        if preview.rule.options.dry_run:
            raise InvalidRuleError("Dry-run rules cannot be executed")

        changes = preview.applicable_changes
        for change in changes:
            validate_edits(change.edits)

        timeout = preview.rule.options.timeout
        deadline = time.monotonic() + timeout if timeout is not None else None

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="llm-replace-apply"
        ) as pool:
            futures = {
                id(c): pool.submit(self.apply_change, c, cancel, deadline) for c in changes
            }
            results: list[ReplaceResult] = []
            for change in preview.per_file_changes:
                if id(change) in futures:
                    results.extend(futures[id(change)].result())
                elif change.error:
                    results.extend(failed_results(change.rejected_edits, change.error))

        log_with_context(
            logger,
            logging.INFO,
            "Executed replace",
            rule_id=preview.rule.id,
            succeeded=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
        )
        return results

    def apply_change(
        self,
        change: FileChange,
        cancel: CancellationToken | None = None,
        deadline: float | None = None,
    ) -> list[ReplaceResult]:
        """Apply one file's edits all-or-nothing."""
        edits = change.edits
        if cancel is not None and cancel.cancelled:
            return failed_results(edits, "cancelled")
        if deadline is not None and time.monotonic() > deadline:
            return failed_results(edits, "timed out")

        with self._lock_for(change.file):
            try:
                current = self.corpus.read_file(change.file)
            except FILE_ERRORS as e:
                return failed_results(edits, f"Unreadable: {e}")

            if change.content_hash is not None and hash_content(current) != change.content_hash:
                return failed_results(edits, "File changed since preview")

            new_text, applied = apply_edits(current, edits)
            try:
                self.corpus.write_file(change.file, new_text)
            except OSError as e:
                self._restore(change.file, current)
                log_with_context(
                    logger, logging.WARNING, "Write failed", file=change.file, error=str(e)
                )
                return failed_results(edits, f"Write failed: {e}")

        source = SourceText(change.file, new_text)
        return [
            ReplaceResult(
                file=change.file,
                span=edit.span,
                old_text=edit.old_text,
                new_text=edit.new_text,
                success=True,
                applied_span=source.span(start, end),
            )
            for edit, (start, end) in zip(edits, applied, strict=True)
        ]

    def _restore(self, path: str, original: str) -> None:
        try:
            self.corpus.write_file(path, original)
        except OSError as e:
            log_with_context(
                logger, logging.ERROR, "Could not restore file", file=path, error=str(e)
            )

    def undo(self, results: list[ReplaceResult]) -> list[ReplaceResult]:
        """Revert successful results using their applied spans.

        Returns:
            One result per reverted edit; a file whose replaced text no
            longer matches is left alone and its results fail.
        """
        by_file: dict[str, list[ReplaceResult]] = {}
        for result in results:
            if result.success and result.applied_span is not None:
                by_file.setdefault(result.file, []).append(result)

        reverted: list[ReplaceResult] = []
        for path in sorted(by_file):
            file_results = sorted(by_file[path], key=lambda r: r.applied_span.start_offset)  # type: ignore[union-attr]
            edits = [
                PlannedEdit(span=r.applied_span, old_text=r.new_text, new_text=r.old_text)  # type: ignore[arg-type]
                for r in file_results
            ]
            try:
                current = self.corpus.read_file(path)
            except FILE_ERRORS as e:
                reverted.extend(failed_results(edits, f"Unreadable: {e}"))
                continue

            stale = any(
                current[e.span.start_offset : e.span.end_offset] != e.old_text for e in edits
            )
            if stale:
                reverted.extend(failed_results(edits, "File changed since replace"))
                continue

            change = FileChange(
                file=path,
                match_count=len(edits),
                edits=edits,
                content_hash=hash_content(current),
            )
            reverted.extend(self.apply_change(change))
        return reverted

    def subset(self, change: FileChange, edits: list[PlannedEdit]) -> FileChange:
        """A copy of ``change`` restricted to some of its edits."""
        return replace(change, edits=edits, match_count=len(edits))
