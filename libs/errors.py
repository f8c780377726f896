# =============================================================================
# Ingest Error Taxonomy
# =============================================================================
# Exception hierarchy shared by the worker, the dispatcher and the
# inspection strategies. Each error carries its kind and a short message
# suitable for the ERROR status published to the job's caller.
# =============================================================================

from enum import Enum
from typing import Optional

__all__ = [
    "ErrorKind",
    "IngestError",
    "MalformedMessageError",
    "UnsupportedTypeError",
    "ExtractionError",
    "PersistenceError",
    "MetadataProjectionError",
    "UnclassifiedError",
    "classify",
]


class ErrorKind(str, Enum):
    """Classification of an ingest failure."""
    MALFORMED_MESSAGE = "MalformedMessageError"
    UNSUPPORTED_TYPE = "UnsupportedTypeError"
    EXTRACTION = "ExtractionError"
    PERSISTENCE = "PersistenceError"
    METADATA_PROJECTION = "MetadataProjectionError"
    UNCLASSIFIED = "UnclassifiedError"


class IngestError(Exception):
    """
    Base class for every failure raised by the ingest pipeline.

    Attributes:
        kind: ErrorKind of this failure
        user_message: Short human-readable summary for the ERROR status
    """

    kind: ErrorKind = ErrorKind.UNCLASSIFIED
    user_message: str = "Error while Ingesting the Data."

    @property
    def details(self) -> str:
        """Underlying cause text reported alongside the short message."""
        return str(self) or self.user_message


class MalformedMessageError(IngestError):
    """The job message could not be decoded into an ingest job."""
    kind = ErrorKind.MALFORMED_MESSAGE
    user_message = "Error parsing the Ingest Job message."


class UnsupportedTypeError(IngestError):
    """No inspection strategy is registered for the resource's data type."""
    kind = ErrorKind.UNSUPPORTED_TYPE
    user_message = "The Data type is not supported for Ingest."

    def __init__(self, data_type: str, supported: Optional[list[str]] = None):
        self.data_type = data_type
        self.supported = sorted(supported or [])
        message = f"No inspector registered for data type '{data_type}'"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)


class ExtractionError(IngestError):
    """The source is unreadable or invalid for its declared format."""
    kind = ErrorKind.EXTRACTION
    user_message = "Error while inspecting the Data."


class PersistenceError(IngestError):
    """A durable write (feature store, blob store or catalog) failed."""
    kind = ErrorKind.PERSISTENCE
    user_message = "Error while persisting the Data."


class MetadataProjectionError(IngestError):
    """The projected copy of the spatial metadata could not be computed."""
    kind = ErrorKind.METADATA_PROJECTION
    user_message = "Error projecting the spatial metadata."


class UnclassifiedError(IngestError):
    """Any fault that does not belong to one of the other kinds."""
    kind = ErrorKind.UNCLASSIFIED
    user_message = "Error while Ingesting the Data."


def classify(exc: BaseException) -> IngestError:
    """
    Map an arbitrary exception onto the ingest error taxonomy.

    Taxonomy members are returned unchanged. Anything else is wrapped in an
    UnclassifiedError whose message is the original exception text and whose
    __cause__ is the original exception.

    Args:
        exc: Exception caught at the worker boundary

    Returns:
        IngestError describing the failure
    """
    if isinstance(exc, IngestError):
        return exc

    message = str(exc) or type(exc).__name__
    wrapped = UnclassifiedError(f"{type(exc).__name__}: {message}")
    wrapped.__cause__ = exc
    return wrapped
