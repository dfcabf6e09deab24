"""JSON-file store for saved analyses, most recent first.

Each entry keeps the summary counters next to a serialized snapshot of the
analysis (raw logs excluded), so listing never has to decode the snapshots.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from api_log_analyzer.parser.base import AnalysisResult

logger = logging.getLogger(__name__)

MAX_ANALYSES = 50


class StorageError(Exception):
    """The store could not be read or written."""


class StorageQuotaError(StorageError):
    """Saving would grow the store past its capacity."""


class AnalysisSummary(BaseModel):
    id: str
    name: str
    created_at: str  # ISO-8601
    total_lines: int
    api_requests: int
    unique_endpoints: int
    junk_filtered: int


class StoredAnalysis(AnalysisSummary):
    data: str  # AnalysisResult JSON without raw_logs


_StoredList = TypeAdapter(list[StoredAnalysis])


class AnalysisStore:
    """Persists analyses to a single JSON file, keeping the newest `max_analyses`."""

    def __init__(self, path: Path, max_analyses: int = MAX_ANALYSES, max_bytes: int | None = None):
        self.path = path
        self.max_analyses = max_analyses
        self.max_bytes = max_bytes

    def save(self, result: AnalysisResult) -> None:
        stored = StoredAnalysis(
            id=result.id,
            name=result.name,
            created_at=result.created_at.isoformat(),
            total_lines=result.stats.total_lines,
            api_requests=result.stats.api_requests,
            unique_endpoints=result.stats.unique_endpoints,
            junk_filtered=result.stats.junk_filtered,
            data=result.model_dump_json(exclude={"raw_logs"}),
        )
        analyses = [stored] + self._read()
        self._write(analyses[: self.max_analyses])

    def list_summaries(self) -> list[AnalysisSummary]:
        return [AnalysisSummary(**a.model_dump(exclude={"data"})) for a in self._read()]

    def get(self, analysis_id: str) -> AnalysisResult | None:
        found = next((a for a in self._read() if a.id == analysis_id), None)
        if found is None:
            return None
        try:
            return AnalysisResult.model_validate_json(found.data)
        except ValidationError as e:
            logger.warning("Invalid analysis data for %s: %s", analysis_id, e)
            return None

    def delete(self, analysis_id: str) -> bool:
        """Remove an analysis. Returns False when no analysis has that id."""
        analyses = self._read()
        kept = [a for a in analyses if a.id != analysis_id]
        if len(kept) == len(analyses):
            return False
        self._write(kept)
        return True

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to clear {self.path}: {e}") from e

    # -- file access ----------------------------------------------------------

    def _read(self) -> list[StoredAnalysis]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            logger.error("Failed to read %s: %s", self.path, e)
            return []
        try:
            text = raw.decode("utf-8")
            if not text.strip():
                return []
            return _StoredList.validate_json(text)
        except (UnicodeDecodeError, ValidationError) as e:
            logger.warning("Invalid data in %s, clearing: %s", self.path, e)
            self.clear()
            return []

    def _write(self, analyses: list[StoredAnalysis]) -> None:
        payload = _StoredList.dump_json(analyses)
        if self.max_bytes is not None and len(payload) > self.max_bytes:
            raise StorageQuotaError(
                f"Store would grow to {len(payload)} bytes (limit {self.max_bytes}). "
                "Consider clearing old analyses."
            )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(payload)
        except OSError as e:
            raise StorageError(f"Failed to save analyses to {self.path}: {e}") from e
