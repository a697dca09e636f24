"""DuckDB schema for the chunk embedding index."""

CREATE_INDEXED_FILES_TABLE = """
    CREATE TABLE IF NOT EXISTS indexed_files (
        file_path VARCHAR PRIMARY KEY,
        content_hash VARCHAR NOT NULL,
        model VARCHAR NOT NULL,
        language VARCHAR,
        chunk_count INTEGER NOT NULL,
        indexed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

CREATE_CHUNKS_TABLE = """
    CREATE TABLE IF NOT EXISTS chunks (
        file_path VARCHAR NOT NULL,
        chunk_index INTEGER NOT NULL,
        start_offset INTEGER NOT NULL,
        end_offset INTEGER NOT NULL,
        model VARCHAR NOT NULL,
        embedding FLOAT[] NOT NULL,
        PRIMARY KEY (file_path, chunk_index)
    )
"""

CREATE_CHUNK_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_chunks_model ON chunks(model)",
]

ALL_TABLES = [CREATE_INDEXED_FILES_TABLE, CREATE_CHUNKS_TABLE]

ALL_INDEXES = CREATE_CHUNK_INDEXES
