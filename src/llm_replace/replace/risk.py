"""Risk classification for planned replaces."""

from collections.abc import Sequence

from llm_replace.config.schema import RiskConfig
from llm_replace.replace.models import FileChange, RiskLevel
from llm_replace.utils.files import matches_any


def is_sensitive(path: str, config: RiskConfig) -> bool:
    """True if a path matches the sensitive-path denylist."""
    return matches_any(path, config.sensitive_paths)


def assess_risk(
    changes: Sequence[FileChange], replacement: str, config: RiskConfig
) -> RiskLevel:
    """Classify a whole replace.

    Rules, first match wins:

    - high: a file has more than ``high_matches_per_file`` matches, or the
      replacement is empty across more than ``high_empty_replacement_files``
      files
    - medium: a file is on the sensitive denylist, or there are more than
      ``medium_total_matches`` matches in total
    - low: every file has at most ``low_max_matches_per_file`` matches and
      at most ``low_max_files`` files are touched
    - medium otherwise
    """
    counts = [len(c.edits) for c in changes if c.edits]
    if not counts:
        return RiskLevel.LOW

    if max(counts) > config.high_matches_per_file:
        return RiskLevel.HIGH
    if replacement == "" and len(counts) > config.high_empty_replacement_files:
        return RiskLevel.HIGH

    if any(is_sensitive(c.file, config) for c in changes if c.edits):
        return RiskLevel.MEDIUM
    if sum(counts) > config.medium_total_matches:
        return RiskLevel.MEDIUM

    if max(counts) <= config.low_max_matches_per_file and len(counts) <= config.low_max_files:
        return RiskLevel.LOW
    return RiskLevel.MEDIUM


def assess_file_risk(change: FileChange, replacement: str, config: RiskConfig) -> RiskLevel:
    """Classify one file's change with the same thresholds."""
    count = len(change.edits)
    if count > config.high_matches_per_file:
        return RiskLevel.HIGH
    if is_sensitive(change.file, config) or (replacement == "" and count):
        return RiskLevel.MEDIUM
    if count <= config.low_max_matches_per_file:
        return RiskLevel.LOW
    return RiskLevel.MEDIUM
