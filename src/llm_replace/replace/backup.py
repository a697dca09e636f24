"""File backups taken before a replace, with rollback."""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from llm_replace.exceptions import ReplaceError
from llm_replace.search.corpus import Corpus


class BackupStore:
    """Stores original file contents under ``backup_dir/<backup_id>/``.

    Each backup has a ``metadata.json`` manifest listing the files it holds.
    """

    def __init__(self, backup_dir: Path) -> None:
        self.backup_dir = Path(backup_dir)

    def create(self, originals: dict[str, str], description: str = "") -> str:
        """Save original contents.

        Args:
            originals: ``{corpus path: original text}``.
            description: Free text stored in the manifest.

        Returns:
            Backup ID for rollback.
        """
        backup_id = f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"
        backup_path = self.backup_dir / backup_id
        files_dir = backup_path / "files"
        files_dir.mkdir(parents=True, exist_ok=True)

        metadata: dict[str, Any] = {
            "description": description,
            "timestamp": datetime.now().isoformat(),
            "files": [],
        }
        for index, (path, text) in enumerate(sorted(originals.items())):
            backup_file = files_dir / f"{index:05d}"
            with open(backup_file, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            metadata["files"].append({"original": path, "backup": backup_file.name})

        (backup_path / "metadata.json").write_text(json.dumps(metadata, indent=2))
        return backup_id

    def restore(self, backup_id: str, corpus: Corpus) -> list[str]:
        """Write backed-up contents back through the corpus.

        Returns:
            Paths restored.

        Raises:
            ReplaceError: If the backup does not exist.
        """
        backup_path = self.backup_dir / backup_id
        metadata_file = backup_path / "metadata.json"
        if not metadata_file.exists():
            raise ReplaceError(f"Backup not found: {backup_id}")

        metadata = json.loads(metadata_file.read_text())
        restored: list[str] = []
        for file_info in metadata["files"]:
            with open(backup_path / "files" / file_info["backup"], encoding="utf-8", newline="") as f:
                corpus.write_file(file_info["original"], f.read())
            restored.append(file_info["original"])
        return restored

    def list_backups(self) -> list[dict[str, Any]]:
        """List available backups, newest first."""
        if not self.backup_dir.exists():
            return []

        backups = []
        for backup_path in self.backup_dir.iterdir():
            metadata_file = backup_path / "metadata.json"
            if backup_path.is_dir() and metadata_file.exists():
                metadata = json.loads(metadata_file.read_text())
                metadata["backup_id"] = backup_path.name
                backups.append(metadata)
        return sorted(backups, key=lambda m: m["timestamp"], reverse=True)
