"""Error taxonomy shared by the backend client, codec and orchestrator."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of failures surfaced or absorbed by the translator."""

    INVALID_ADDRESS = "invalid_address"
    UNREACHABLE = "unreachable"
    FORBIDDEN = "forbidden"
    CARDINALITY_MISMATCH = "cardinality_mismatch"
    DOCUMENT_PARSE_FAILURE = "document_parse_failure"


class SubBatchError(Exception):
    """Base exception carrying an ErrorKind."""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BackendError(SubBatchError):
    """Raised when a call to the text-generation backend fails."""

    kind = ErrorKind.UNREACHABLE


class InvalidAddressError(BackendError):
    """Raised when the backend address is not a well-formed URL."""

    kind = ErrorKind.INVALID_ADDRESS

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Invalid backend address: {address!r}")


class BackendUnreachableError(BackendError):
    """Raised on DNS failure, refused connection or timeout."""

    kind = ErrorKind.UNREACHABLE


class BackendResponseError(BackendError):
    """
    Raised when the backend answers with a non-success status or a body
    that cannot be used.
    """

    kind = ErrorKind.UNREACHABLE

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class BackendForbiddenError(BackendResponseError):
    """Raised when the backend rejects the request because of its origin policy."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, url: str):
        super().__init__(f"Backend refused request to {url} (403)", status_code=403)


class CardinalityMismatchError(SubBatchError):
    """
    Raised when a decoded payload cannot be reconciled with the expected
    segment count.

    Only the strict splitting helper raises this; decode() absorbs it and
    returns the original segments instead.
    """

    kind = ErrorKind.CARDINALITY_MISMATCH

    def __init__(self, expected_count: int, delimiter_count: int, line_count: int):
        self.expected_count = expected_count
        self.delimiter_count = delimiter_count
        self.line_count = line_count
        super().__init__(
            f"Segment count mismatch: expected {expected_count}, got "
            f"{delimiter_count} delimited pieces and {line_count} non-empty lines"
        )


class SubtitleParseError(SubBatchError, ValueError):
    """Raised when subtitle content yields no usable entries."""

    kind = ErrorKind.DOCUMENT_PARSE_FAILURE


class OrchestratorStateError(SubBatchError, RuntimeError):
    """Raised on an invalid translation run state transition."""
