"""Junk line classifier — decides which log lines are noise."""

import re
from pathlib import Path

import yaml

PATTERNS_FILE = Path(__file__).parent / "junk_patterns.yaml"

MIN_LINE_LENGTH = 3


def load_patterns(file_path: Path = PATTERNS_FILE) -> list[str]:
    """Load an ordered list of regex patterns from a YAML file."""
    data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{file_path}: expected a YAML list of patterns")
    return [str(p) for p in data]


class JunkClassifier:
    """Classifies log lines as noise using an ordered list of patterns."""

    def __init__(self, patterns: list[str] | None = None):
        if patterns is None:
            patterns = load_patterns()
        self.patterns = [re.compile(p) for p in patterns]

    def is_junk(self, line: str) -> bool:
        trimmed = line.strip()
        if len(trimmed) < MIN_LINE_LENGTH:
            return True
        return any(p.search(trimmed) for p in self.patterns)
