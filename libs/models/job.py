# =============================================================================
# Job Models Module
# =============================================================================
# Defines the inbound ingest job:
# - JobMessage: Raw message as delivered by the broker
# - IngestJob: Decoded job payload
# - decode_job / recover_job_id: Message decoding helpers
# =============================================================================

import json
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from libs.errors import MalformedMessageError

from .data import DataResource, IngestMode

__all__ = ["JobMessage", "IngestJob", "decode_job", "recover_job_id"]


@dataclass
class JobMessage:
    """
    Raw job message as received from the broker.

    Attributes:
        key: Message key (the job id when the producer sets it)
        value: Message body (JSON text)
        source: Queue or topic the message came from
        receipt: Broker handle needed to settle the message
    """
    key: Optional[str]
    value: Union[str, bytes]
    source: str = ""
    receipt: Any = field(default=None, repr=False, compare=False)


class IngestJob(BaseModel):
    """
    Ingest job payload.

    Wire format: ``{jobId, jobType: "ingest", data, host}``. ``host=true``
    asks for the data to be persisted in addition to being inspected.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_id: str = Field(..., min_length=1)
    job_type: Literal["ingest"] = "ingest"
    data: DataResource
    host: bool = False

    @property
    def mode(self) -> IngestMode:
        return IngestMode.from_host(self.host)


def decode_job(message: JobMessage) -> IngestJob:
    """
    Decode a job message body into an IngestJob.

    Args:
        message: Raw broker message

    Returns:
        Validated IngestJob

    Raises:
        MalformedMessageError: If the body is not JSON or not a valid ingest job
    """
    try:
        return IngestJob.model_validate_json(message.value)
    except ValidationError as exc:
        raise MalformedMessageError(
            f"Invalid ingest job message: {exc.error_count()} validation error(s): {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise MalformedMessageError(f"Invalid ingest job message: {exc}") from exc


def recover_job_id(message: JobMessage) -> Optional[str]:
    """
    Find a job id to report against when the message cannot be decoded.

    Prefers the message key; otherwise looks for a string ``jobId`` in the
    body if the body is at least a JSON object.

    Returns:
        Job id, or None when no status target can be recovered
    """
    if message.key:
        return message.key

    try:
        body = json.loads(message.value)
    except (TypeError, ValueError):
        return None

    if isinstance(body, dict):
        job_id = body.get("jobId")
        if isinstance(job_id, str) and job_id:
            return job_id
    return None
