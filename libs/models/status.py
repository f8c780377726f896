# =============================================================================
# Job Status Models Module
# =============================================================================
# Defines the status updates published while a job is processed:
# - JobStatus: Running, Success, Error
# - JobProgress: Percentage complete
# - DataResult / ErrorResult: Terminal job results
# - StatusUpdate: One message on the status channel
# =============================================================================

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from libs.errors import IngestError

__all__ = [
    "JobStatus",
    "JobProgress",
    "DataResult",
    "ErrorResult",
    "JobResult",
    "StatusUpdate",
]


_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JobStatus(str, Enum):
    """Lifecycle state of a job as seen on the status channel."""

    RUNNING = "Running"
    SUCCESS = "Success"
    ERROR = "Error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCESS, JobStatus.ERROR)


class JobProgress(BaseModel):
    """Progress of a job as an integer percentage."""

    model_config = _CAMEL_CONFIG

    percent_complete: int = Field(..., ge=0, le=100)


class DataResult(BaseModel):
    """Successful ingest: the job created a resource with this id."""

    model_config = _CAMEL_CONFIG

    type: Literal["data"] = "data"
    data_id: str


class ErrorResult(BaseModel):
    """
    Failed ingest.

    Attributes:
        message: Short human-readable summary
        details: Underlying cause text
        error_type: Error classification (e.g. "UnsupportedTypeError")
    """

    model_config = _CAMEL_CONFIG

    type: Literal["error"] = "error"
    message: str
    details: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def from_error(cls, error: IngestError) -> "ErrorResult":
        return cls(
            message=error.user_message,
            details=error.details,
            error_type=error.kind.value,
        )


JobResult = Annotated[Union[DataResult, ErrorResult], Field(discriminator="type")]


class StatusUpdate(BaseModel):
    """
    One status message for a job.

    Use the ``running``, ``success`` and ``error`` constructors; they produce
    the three message shapes consumers expect.
    """

    model_config = _CAMEL_CONFIG

    job_id: str
    status: JobStatus
    progress: Optional[JobProgress] = None
    result: Optional[JobResult] = None

    @classmethod
    def running(cls, job_id: str, percent_complete: int = 0) -> "StatusUpdate":
        return cls(
            job_id=job_id,
            status=JobStatus.RUNNING,
            progress=JobProgress(percent_complete=percent_complete),
        )

    @classmethod
    def success(cls, job_id: str, data_id: str) -> "StatusUpdate":
        return cls(
            job_id=job_id,
            status=JobStatus.SUCCESS,
            progress=JobProgress(percent_complete=100),
            result=DataResult(data_id=data_id),
        )

    @classmethod
    def error(cls, job_id: str, error: IngestError) -> "StatusUpdate":
        return cls(
            job_id=job_id,
            status=JobStatus.ERROR,
            result=ErrorResult.from_error(error),
        )

    def to_message(self) -> dict:
        """Wire representation (camelCase keys, unset fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
