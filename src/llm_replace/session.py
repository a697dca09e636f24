"""Per-caller store of queries, previews, operations, and reports."""

import threading
from collections import OrderedDict
from typing import Generic, TypeVar

from llm_replace.enrichment.models import QueryEnhancement, SemanticReport
from llm_replace.replace.models import Preview, ReplaceOperation
from llm_replace.search.models import SearchQuery, SearchResponse

T = TypeVar("T")

DEFAULT_MAX_ENTRIES = 256


class _BoundedStore(Generic[T]):
    """Insertion-ordered map that drops its oldest entries past a limit."""

    def __init__(self, max_entries: int) -> None:
        self._items: OrderedDict[str, T] = OrderedDict()
        self._max_entries = max_entries

    def put(self, key: str, value: T) -> None:
        self._items[key] = value
        self._items.move_to_end(key)
        while len(self._items) > self._max_entries:
            self._items.popitem(last=False)

    def get(self, key: str) -> T | None:
        return self._items.get(key)

    def values(self) -> list[T]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class SearchSession:
    """Everything one caller has searched, previewed and replaced.

    A session is passed explicitly to the service; nothing is shared
    between sessions. All methods are thread-safe.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._lock = threading.Lock()
        self._queries: _BoundedStore[SearchQuery] = _BoundedStore(max_entries)
        self._responses: _BoundedStore[SearchResponse] = _BoundedStore(max_entries)
        self._previews: _BoundedStore[Preview] = _BoundedStore(max_entries)
        self._operations: _BoundedStore[ReplaceOperation] = _BoundedStore(max_entries)
        self._reports: _BoundedStore[SemanticReport] = _BoundedStore(max_entries)
        self._enhancements: _BoundedStore[QueryEnhancement] = _BoundedStore(max_entries)

    def record_response(self, response: SearchResponse) -> None:
        with self._lock:
            self._queries.put(response.query.id, response.query)
            self._responses.put(response.query.id, response)

    def get_query(self, query_id: str) -> SearchQuery | None:
        with self._lock:
            return self._queries.get(query_id)

    def get_response(self, query_id: str) -> SearchResponse | None:
        with self._lock:
            return self._responses.get(query_id)

    def history(self) -> list[str]:
        """Query texts in the order they were run, oldest first."""
        with self._lock:
            return [q.text for q in self._queries.values()]

    def record_preview(self, preview: Preview) -> None:
        with self._lock:
            self._previews.put(preview.id, preview)

    def get_preview(self, preview_id: str) -> Preview | None:
        with self._lock:
            return self._previews.get(preview_id)

    def record_operation(self, operation: ReplaceOperation) -> None:
        with self._lock:
            self._operations.put(operation.id, operation)

    def get_operation(self, operation_id: str) -> ReplaceOperation | None:
        with self._lock:
            return self._operations.get(operation_id)

    def list_operations(self) -> list[ReplaceOperation]:
        with self._lock:
            return self._operations.values()

    def record_report(self, report: SemanticReport) -> None:
        with self._lock:
            self._reports.put(report.id, report)

    def get_report(self, report_id: str) -> SemanticReport | None:
        with self._lock:
            return self._reports.get(report_id)

    def record_enhancement(self, enhancement: QueryEnhancement) -> None:
        with self._lock:
            self._enhancements.put(enhancement.id, enhancement)

    def get_enhancement(self, enhancement_id: str) -> QueryEnhancement | None:
        with self._lock:
            return self._enhancements.get(enhancement_id)

    def clear(self) -> None:
        with self._lock:
            for store in (
                self._queries,
                self._responses,
                self._previews,
                self._operations,
                self._reports,
                self._enhancements,
            ):
                store.clear()
