"""Result data models"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

MIME_TYPES_BY_FORMAT = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "glb": "model/gltf-binary",
}


@dataclass(frozen=True)
class GenerationResult:
    """Binary payload returned by any completed operation"""
    data: bytes
    format: str
    seed: Optional[int] = None
    finish_reason: Optional[str] = None

    @property
    def mime_type(self) -> str:
        return MIME_TYPES_BY_FORMAT.get(self.format, "application/octet-stream")

    @property
    def bytes_size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class BalanceResult:
    credits: float


class JobState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class AsyncJob:
    """Server-side generation tracked by the poller"""
    job_id: str
    state: JobState = JobState.SUBMITTED
    attempts: int = 0
