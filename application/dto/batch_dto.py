# application/dto/batch_dto.py
# Data Transfer Objects for batch HLS conversion requests and results.

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class HlsConversionRequestDTO:
    """Single file → HLS conversion request."""
    input_path: str
    output_dir: str
    manifest_path: str
    segment_pattern: str
    segment_seconds: int = 10


@dataclass
class HlsConversionResultDTO:
    """Result for a single file conversion."""
    filename: str
    status: str = "queued"       # queued | done | error
    manifest_path: Optional[str] = None
    error: Optional[str] = None
    elapsed: float = 0.0


@dataclass
class BatchConversionResultDTO:
    """Summary for a whole batch run."""
    results: List[HlsConversionResultDTO] = field(default_factory=list)
    total: int = 0
    done: int = 0
    failed: int = 0

    @property
    def failed_files(self) -> List[str]:
        return [r.filename for r in self.results if r.status == "error"]

    @property
    def ok(self) -> bool:
        return self.failed == 0
