"""Unit tests for semantic matching and the DuckDB vector index."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from llm_replace.exceptions import IndexingError, ProviderError, SemanticBackendUnavailable
from llm_replace.providers import MockProvider
from llm_replace.search import (
    InMemoryCorpus,
    MatchMode,
    SearchEngine,
    SearchQuery,
    SemanticStatus,
)
from llm_replace.search.index import VectorIndex, chunk_text
from llm_replace.search.semantic import (
    Neighbor,
    SemanticBackend,
    SemanticMatcher,
    cosine_similarity,
)


@pytest.fixture
def corpus() -> InMemoryCorpus:
    return InMemoryCorpus(
        {
            "config.py": "def parse config file loader\n",
            "fruit.txt": "completely unrelated banana text\n",
        }
    )


@pytest.fixture
def index(mock_provider: MockProvider) -> Generator[VectorIndex, None, None]:
    vector_index = VectorIndex(mock_provider)
    yield vector_index
    vector_index.close()


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    def test_identical_vectors(self) -> None:
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self) -> None:
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_degenerate_vectors(self) -> None:
        """Test empty, zero and mismatched vectors score zero."""
        assert cosine_similarity([], []) == 0.0
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([1.0], [1.0, 1.0]) == 0.0


class TestChunkText:
    """Tests for line-aligned chunking."""

    def test_offsets_map_back_to_text(self) -> None:
        """Test every chunk's offsets slice its own text out of the file."""
        text = "".join(f"line number {i}\n" for i in range(50))
        chunks = chunk_text(text, chunk_size=100, chunk_overlap=20)

        assert len(chunks) > 1
        for chunk in chunks:
            assert text[chunk.start_offset : chunk.end_offset] == chunk.text
        assert chunks[0].start_offset == 0
        assert chunks[-1].end_offset == len(text)

    def test_overlap_repeats_trailing_lines(self) -> None:
        """Test consecutive chunks share their boundary lines."""
        text = "".join(f"row {i:02d}\n" for i in range(20))
        chunks = chunk_text(text, chunk_size=35, chunk_overlap=7)
        assert chunks[1].start_offset < chunks[0].end_offset

    def test_blank_text(self) -> None:
        assert chunk_text("") == []
        assert chunk_text("   \n\n") == []


class TestVectorIndex:
    """Tests for indexing and nearest-neighbor queries."""

    def test_index_and_query(self, index: VectorIndex, corpus: InMemoryCorpus) -> None:
        """Test indexed chunks come back ranked by similarity."""
        stats = index.index_corpus(corpus)
        assert stats.files_indexed == 2
        assert stats.chunks_written == 2

        neighbors = index.nearest_neighbors(index.embed("parse config file loader"), k=1)
        assert neighbors[0].file == "config.py"
        assert neighbors[0].score > 0.8

    def test_unchanged_files_are_skipped(
        self, index: VectorIndex, corpus: InMemoryCorpus
    ) -> None:
        """Test re-indexing unchanged content does no work."""
        index.index_corpus(corpus)
        corpus.write_file("fruit.txt", "a different banana\n")

        stats = index.index_corpus(corpus)
        assert stats.files_unchanged == 1
        assert stats.files_indexed == 1

    def test_removed_files_are_pruned(self, index: VectorIndex, corpus: InMemoryCorpus) -> None:
        """Test files gone from the workspace leave the index."""
        index.index_corpus(corpus)
        del corpus.files["fruit.txt"]

        stats = index.index_corpus(corpus)
        assert stats.files_removed == 1
        assert index.get_stats()["total_files"] == 1

    def test_persistent_database(self, temp_dir: Path, mock_provider: MockProvider) -> None:
        """Test an on-disk index survives reopening."""
        db_path = temp_dir / "idx" / "index.duckdb"
        corpus = InMemoryCorpus({"a.py": "alpha beta gamma\n"})

        first = VectorIndex(mock_provider, db_path=db_path)
        first.index_corpus(corpus)
        first.close()

        second = VectorIndex(mock_provider, db_path=db_path)
        try:
            assert second.get_stats()["total_chunks"] == 1
            assert second.index_corpus(corpus).files_unchanged == 1
        finally:
            second.close()

    def test_clear(self, index: VectorIndex, corpus: InMemoryCorpus) -> None:
        index.index_corpus(corpus)
        assert index.clear() == 2
        assert index.get_stats()["total_chunks"] == 0

    def test_embedding_failure_raises_indexing_error(self, corpus: InMemoryCorpus) -> None:
        """Test provider failures during indexing surface as IndexingError."""
        provider = MagicMock()
        provider.embedding_model_name = "broken"
        provider.embed.side_effect = ProviderError("down")

        vector_index = VectorIndex(provider)
        try:
            with pytest.raises(IndexingError):
                vector_index.index_corpus(corpus)
            with pytest.raises(SemanticBackendUnavailable):
                vector_index.embed("query")
        finally:
            vector_index.close()


class TestSemanticMatcher:
    """Tests for semantic matching on top of a backend."""

    def test_returns_similar_spans(self, index: VectorIndex, corpus: InMemoryCorpus) -> None:
        """Test results carry the indexed span and a clamped score."""
        index.index_corpus(corpus)
        matcher = SemanticMatcher(index, min_score=0.5)

        query = SearchQuery("parse config file loader", MatchMode.SEMANTIC)
        outcome = matcher.match(query, corpus)

        assert outcome.backend_status == SemanticStatus.OK
        assert [r.file for r in outcome.results] == ["config.py"]
        result = outcome.results[0]
        assert result.strategy == MatchMode.SEMANTIC
        assert 0.5 <= result.relevance <= 1.0
        assert result.matched_text == "def parse config file loader\n"

    def test_backend_failure_degrades(self, corpus: InMemoryCorpus) -> None:
        """Test a failing backend yields no results and unavailable status."""
        backend = MagicMock(spec=SemanticBackend)
        backend.embed.side_effect = SemanticBackendUnavailable("offline")

        outcome = SemanticMatcher(backend).match(
            SearchQuery("anything", MatchMode.SEMANTIC), corpus
        )
        assert outcome.results == []
        assert outcome.backend_status == SemanticStatus.UNAVAILABLE

    def test_stale_offsets_are_clamped(self, corpus: InMemoryCorpus) -> None:
        """Test neighbors past the end of a shrunken file are clamped or dropped."""
        backend = MagicMock(spec=SemanticBackend)
        backend.embed.return_value = [1.0]
        backend.nearest_neighbors.return_value = [
            Neighbor("config.py", 4, 10_000, 0.9),
            Neighbor("fruit.txt", 5_000, 6_000, 0.9),
        ]

        outcome = SemanticMatcher(backend).match(
            SearchQuery("anything", MatchMode.SEMANTIC), corpus
        )
        assert [r.file for r in outcome.results] == ["config.py"]
        assert outcome.results[0].span.end_offset == len(corpus.files["config.py"])

    def test_engine_reports_ok_status(self, index: VectorIndex, corpus: InMemoryCorpus) -> None:
        """Test the engine passes the backend status through."""
        index.index_corpus(corpus)
        engine = SearchEngine(corpus, semantic_backend=index)

        response = engine.search(SearchQuery("banana text", MatchMode.SEMANTIC))

        assert response.semantic_status == SemanticStatus.OK
        assert response.files == ["fruit.txt"]
