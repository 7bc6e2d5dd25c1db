"""Shared Pydantic schemas for the subtitle batch translator."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from subbatch.common.utils import DateTimeUtils, URLUtils

DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"

FORBIDDEN_REMEDIATION = (
    "Ollama is running but blocking external requests. "
    "Quit Ollama, set the environment variable OLLAMA_ORIGINS to *, "
    "then restart Ollama."
)


class ConnectionStatus(str, Enum):
    """Outcome of a backend reachability probe."""

    OK = "ok"
    FORBIDDEN = "forbidden"
    UNREACHABLE = "unreachable"
    INVALID_ADDRESS = "invalid_address"


class TranslationState(str, Enum):
    """Lifecycle of a translation run over one document."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


class EventType(str, Enum):
    """Types of progress events emitted during a translation run."""

    TRANSLATION_STARTED = "translation.started"
    BATCH_COMPLETED = "translation.batch.completed"
    TRANSLATION_COMPLETED = "translation.completed"


class FallbackReason(str, Enum):
    """Why a batch kept its original text."""

    BACKEND_ERROR = "backend_error"
    CARDINALITY_MISMATCH = "cardinality_mismatch"


class ModelDescriptor(BaseModel):
    """A model advertised by the backend's /api/tags endpoint."""

    name: str = Field(..., description="Model name, e.g. 'qwen2.5:7b'")
    modified_at: Optional[str] = Field(None, description="Last modification time")
    size: Optional[int] = Field(None, description="Model size in bytes")


class ConnectionResult(BaseModel):
    """Result of probing a backend address."""

    status: ConnectionStatus = Field(..., description="Probe outcome")
    detail: Optional[str] = Field(None, description="Human readable detail")

    @property
    def ok(self) -> bool:
        return self.status == ConnectionStatus.OK

    @property
    def remediation(self) -> Optional[str]:
        """Hint for fixing a blocked connection, when one applies."""
        if self.status == ConnectionStatus.FORBIDDEN:
            return FORBIDDEN_REMEDIATION
        return None


class BackendConfig(BaseModel):
    """
    Backend address and model selection.

    The raw host is stored exactly as entered; normalization happens on read.
    """

    host: str = Field(default=DEFAULT_OLLAMA_HOST, description="Raw backend address")
    model: str = Field(default="", description="Selected model name")

    @property
    def normalized_host(self) -> str:
        return URLUtils.normalize_host(self.host)


class StatsSnapshot(BaseModel):
    """Point-in-time view of translation progress."""

    total: int = Field(..., ge=0)
    processed: int = Field(..., ge=0)
    elapsed_seconds: float = Field(..., ge=0)
    throughput: float = Field(..., ge=0, description="Segments per second")
    progress_percent: float = Field(..., ge=0, le=100)
    complete: bool = False


class ProgressEvent(BaseModel):
    """Progress notification published by the batch orchestrator."""

    event_type: EventType = Field(..., description="Type of event")
    timestamp: datetime = Field(
        default_factory=DateTimeUtils.get_current_utc_datetime,
        description="When the event occurred",
    )
    total_batches: int = Field(..., ge=0)
    batch_index: Optional[int] = Field(None, description="0-based batch index")
    start_index: Optional[int] = Field(None, description="First entry index")
    end_index: Optional[int] = Field(None, description="One past the last entry index")
    fallback: Optional[FallbackReason] = Field(
        None, description="Set when the batch kept its original text"
    )
    stats: StatsSnapshot = Field(..., description="Progress at emission time")
