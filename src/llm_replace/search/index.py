"""DuckDB-backed chunk embedding index.

Files are split into line-aligned chunks, embedded through an
``LLMProvider`` and stored with their character offsets, so nearest
neighbors map straight back to spans. Unchanged files (same content hash
and embedding model) are skipped on re-index.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import duckdb

from llm_replace.cancellation import CancellationToken
from llm_replace.exceptions import (
    IndexingError,
    LLMReplaceError,
    SemanticBackendUnavailable,
)
from llm_replace.providers.base import LLMProvider
from llm_replace.search.base import FILE_ERRORS
from llm_replace.search.corpus import Corpus
from llm_replace.search.models import FileWarning, SearchOptions, SearchScope
from llm_replace.search.schema import ALL_INDEXES, ALL_TABLES
from llm_replace.search.semantic import Neighbor, SemanticBackend, cosine_similarity
from llm_replace.utils.files import detect_language
from llm_replace.utils.hashing import hash_content
from llm_replace.utils.logging import get_logger, log_with_context
from llm_replace.utils.retry import llm_retry

logger = get_logger(__name__)


@dataclass(frozen=True)
class TextChunk:
    """A line-aligned slice of a file."""

    chunk_index: int
    start_offset: int
    end_offset: int
    text: str


@dataclass
class IndexStats:
    """Statistics from one indexing run."""

    files_indexed: int = 0
    files_unchanged: int = 0
    files_failed: int = 0
    files_removed: int = 0
    chunks_written: int = 0
    cancelled: bool = False
    duration_ms: float = 0.0
    warnings: list[FileWarning] = field(default_factory=list)


def chunk_text(text: str, chunk_size: int = 500, chunk_overlap: int = 50) -> list[TextChunk]:
    """Split text into line-aligned chunks with trailing-line overlap.

    Args:
        text: Text content to chunk.
        chunk_size: Target maximum characters per chunk.
        chunk_overlap: Characters of trailing lines repeated at the start
            of the next chunk.

    Returns:
        Chunks with absolute offsets; whitespace-only chunks are dropped.
    """
    if not text or not text.strip():
        return []

    lines: list[tuple[int, int]] = []
    offset = 0
    for line in text.splitlines(keepends=True):
        lines.append((offset, offset + len(line)))
        offset += len(line)

    groups: list[list[tuple[int, int]]] = []
    current: list[tuple[int, int]] = []
    size = 0
    for start, end in lines:
        length = end - start
        if current and size + length > chunk_size:
            groups.append(current)
            overlap: list[tuple[int, int]] = []
            overlap_size = 0
            for s, e in reversed(current):
                if overlap_size + (e - s) > chunk_overlap:
                    break
                overlap.insert(0, (s, e))
                overlap_size += e - s
            current = overlap
            size = overlap_size
        current.append((start, end))
        size += length
    if current:
        groups.append(current)

    chunks: list[TextChunk] = []
    for group in groups:
        start, end = group[0][0], group[-1][1]
        content = text[start:end]
        if content.strip():
            chunks.append(TextChunk(len(chunks), start, end, content))
    return chunks


class VectorIndex(SemanticBackend):
    """Semantic backend storing chunk embeddings in DuckDB."""

    def __init__(
        self,
        provider: LLMProvider,
        db_path: Path | str | None = None,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        batch_size: int = 32,
    ) -> None:
        """Initialize the index.

        Args:
            provider: Provider with embedding support.
            db_path: Path to DuckDB database. None for in-memory.
            chunk_size: Target characters per chunk.
            chunk_overlap: Overlap between consecutive chunks.
            batch_size: Texts per embedding request.
        """
        self.provider = provider
        self.db_path = Path(db_path) if db_path else None
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.batch_size = batch_size

        self._lock = threading.Lock()
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._init_database()

    @property
    def model(self) -> str:
        return self.provider.embedding_model_name

    def _init_database(self) -> None:
        conn = self._get_connection()
        for table_sql in ALL_TABLES:
            conn.execute(table_sql)
        for index_sql in ALL_INDEXES:
            conn.execute(index_sql)

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            if self.db_path:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = duckdb.connect(str(self.db_path))
            else:
                self._conn = duckdb.connect(":memory:")
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    # -------------------------------------------------------------------------
    # Embedding
    # -------------------------------------------------------------------------

    @llm_retry
    def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        return self.provider.embed(texts).embeddings

    def _embed_all(self, texts: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for i in range(0, len(texts), self.batch_size):
            vectors.extend(self._embed_batch(texts[i : i + self.batch_size]))
        return vectors

    def embed(self, text: str) -> list[float]:
        try:
            vectors = self._embed_batch([text])
        except (LLMReplaceError, NotImplementedError, ConnectionError) as e:
            raise SemanticBackendUnavailable(f"Embedding failed: {e}") from e
        if not vectors:
            raise SemanticBackendUnavailable("Provider returned no embedding")
        return vectors[0]

    # -------------------------------------------------------------------------
    # Indexing
    # -------------------------------------------------------------------------

    def index_text(self, path: str, text: str) -> int | None:
        """Index one file's text.

        Returns:
            Number of chunks written, or None if the file was unchanged.
        """
        content_hash = hash_content(text)
        with self._lock:
            row = (
                self._get_connection()
                .execute(
                    "SELECT content_hash, model FROM indexed_files WHERE file_path = ?",
                    [path],
                )
                .fetchone()
            )
        if row is not None and row[0] == content_hash and row[1] == self.model:
            return None

        chunks = chunk_text(text, self.chunk_size, self.chunk_overlap)
        vectors = self._embed_all([c.text for c in chunks]) if chunks else []

        with self._lock:
            conn = self._get_connection()
            conn.execute("BEGIN TRANSACTION")
            try:
                conn.execute("DELETE FROM chunks WHERE file_path = ?", [path])
                conn.execute("DELETE FROM indexed_files WHERE file_path = ?", [path])
                if chunks:
                    conn.executemany(
                        """
                        INSERT INTO chunks
                            (file_path, chunk_index, start_offset, end_offset, model, embedding)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        [
                            [path, c.chunk_index, c.start_offset, c.end_offset, self.model, v]
                            for c, v in zip(chunks, vectors, strict=True)
                        ],
                    )
                conn.execute(
                    """
                    INSERT INTO indexed_files
                        (file_path, content_hash, model, language, chunk_count)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [path, content_hash, self.model, detect_language(path), len(chunks)],
                )
                conn.execute("COMMIT")
            except duckdb.Error:
                conn.execute("ROLLBACK")
                raise
        return len(chunks)

    def index_corpus(
        self,
        corpus: Corpus,
        scope: SearchScope | None = None,
        options: SearchOptions | None = None,
        cancel: CancellationToken | None = None,
    ) -> IndexStats:
        """Index every file in a scope.

        Files indexed earlier but no longer present in a workspace-wide
        scope are removed from the index.

        Raises:
            IndexingError: If the embedding provider fails.
        """
        scope = scope or SearchScope()
        options = options or SearchOptions()
        start_time = time.perf_counter()
        stats = IndexStats()

        files = corpus.select_files(scope, options)
        for path in files:
            if cancel is not None and cancel.cancelled:
                stats.cancelled = True
                break
            try:
                text = corpus.read_file(path)
            except FILE_ERRORS as e:
                stats.files_failed += 1
                stats.warnings.append(FileWarning(path, str(e)))
                continue

            try:
                written = self.index_text(path, text)
            except (LLMReplaceError, NotImplementedError, ConnectionError) as e:
                raise IndexingError(f"Failed to embed {path}: {e}") from e

            if written is None:
                stats.files_unchanged += 1
            else:
                stats.files_indexed += 1
                stats.chunks_written += written

        if not stats.cancelled and not scope.files and not scope.directories:
            stats.files_removed = self._prune(set(files))

        stats.duration_ms = (time.perf_counter() - start_time) * 1000
        log_with_context(
            logger,
            logging.INFO,
            "Indexed corpus",
            files_indexed=stats.files_indexed,
            files_unchanged=stats.files_unchanged,
            files_failed=stats.files_failed,
            chunks=stats.chunks_written,
        )
        return stats

    def _prune(self, keep: set[str]) -> int:
        with self._lock:
            conn = self._get_connection()
            indexed = [r[0] for r in conn.execute("SELECT file_path FROM indexed_files").fetchall()]
            stale = [p for p in indexed if p not in keep]
            for path in stale:
                conn.execute("DELETE FROM chunks WHERE file_path = ?", [path])
                conn.execute("DELETE FROM indexed_files WHERE file_path = ?", [path])
        return len(stale)

    # -------------------------------------------------------------------------
    # Querying
    # -------------------------------------------------------------------------

    def nearest_neighbors(self, vector: list[float], k: int) -> list[Neighbor]:
        try:
            with self._lock:
                rows = (
                    self._get_connection()
                    .execute(
                        """
                        SELECT file_path, start_offset, end_offset, embedding
                        FROM chunks
                        WHERE model = ?
                        """,
                        [self.model],
                    )
                    .fetchall()
                )
        except duckdb.Error as e:
            raise SemanticBackendUnavailable(f"Index query failed: {e}") from e

        scored = (
            Neighbor(
                file=row[0],
                start_offset=row[1],
                end_offset=row[2],
                score=cosine_similarity(vector, list(row[3])),
            )
            for row in rows
        )
        return sorted(scored, key=lambda n: (-n.score, n.file, n.start_offset))[:k]

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the index."""
        with self._lock:
            conn = self._get_connection()
            file_row = conn.execute("SELECT COUNT(*) FROM indexed_files").fetchone()
            chunk_row = conn.execute("SELECT COUNT(*) FROM chunks").fetchone()
            languages = conn.execute(
                """
                SELECT language, COUNT(*) AS count
                FROM indexed_files
                WHERE language IS NOT NULL
                GROUP BY language
                ORDER BY count DESC
                LIMIT 10
                """
            ).fetchall()

        return {
            "total_files": file_row[0] if file_row else 0,
            "total_chunks": chunk_row[0] if chunk_row else 0,
            "languages": {row[0]: row[1] for row in languages},
            "model": self.model,
        }

    def clear(self) -> int:
        """Remove everything from the index.

        Returns:
            Number of files removed.
        """
        with self._lock:
            conn = self._get_connection()
            count_row = conn.execute("SELECT COUNT(*) FROM indexed_files").fetchone()
            conn.execute("DELETE FROM chunks")
            conn.execute("DELETE FROM indexed_files")
        return count_row[0] if count_row else 0
