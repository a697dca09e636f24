"""Content hashing and identifier utilities."""

import hashlib
import json
from typing import Any


def hash_content(content: str, length: int = 16) -> str:
    """Hash string content using SHA256.

    Args:
        content: String content to hash.
        length: Length of hash to return (max 64).

    Returns:
        Hex digest truncated to specified length.
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:length]


def hash_fields(prefix: str, length: int = 16, **fields: Any) -> str:
    """Generate a deterministic identifier from named fields.

    ``None`` values are dropped and keys are sorted so the same logical
    input always maps to the same identifier.

    Args:
        prefix: Identifier prefix (e.g., 'q' for queries).
        length: Length of the hash part.
        **fields: Values to include. Must be JSON-serializable (``str``
            is used as a fallback for other types).

    Returns:
        Identifier in format "prefix_hash".
    """
    key_data = {k: v for k, v in sorted(fields.items()) if v is not None}
    key_string = json.dumps(key_data, sort_keys=True, default=str)
    return f"{prefix}_{hash_content(key_string, length)}"
