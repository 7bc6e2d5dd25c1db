"""Tests for shared schemas and the error taxonomy."""

import pytest
from pydantic import ValidationError

from subbatch.common.exceptions import (
    BackendError,
    BackendForbiddenError,
    BackendResponseError,
    ErrorKind,
    InvalidAddressError,
    OrchestratorStateError,
)
from subbatch.common.schemas import (
    DEFAULT_OLLAMA_HOST,
    BackendConfig,
    ConnectionResult,
    ConnectionStatus,
    EventType,
    ProgressEvent,
    StatsSnapshot,
)


@pytest.mark.unit
class TestBackendConfig:
    """Test backend configuration model."""

    def test_defaults(self):
        config = BackendConfig()

        assert config.host == DEFAULT_OLLAMA_HOST == "http://127.0.0.1:11434"
        assert config.model == ""

    def test_normalized_host_leaves_raw_value(self):
        config = BackendConfig(host=" 192.168.0.5\uff1a11434/ ")

        assert config.normalized_host == "http://192.168.0.5:11434"
        assert config.host == " 192.168.0.5\uff1a11434/ "


@pytest.mark.unit
class TestConnectionResult:
    """Test probe result helpers."""

    @pytest.mark.parametrize(
        "status,ok,has_remediation",
        [
            (ConnectionStatus.OK, True, False),
            (ConnectionStatus.FORBIDDEN, False, True),
            (ConnectionStatus.UNREACHABLE, False, False),
            (ConnectionStatus.INVALID_ADDRESS, False, False),
        ],
    )
    def test_ok_and_remediation(self, status, ok, has_remediation):
        result = ConnectionResult(status=status)

        assert result.ok is ok
        assert (result.remediation is not None) is has_remediation


@pytest.mark.unit
class TestProgressEvent:
    """Test progress event model."""

    def test_event_serializes_with_timestamp(self):
        event = ProgressEvent(
            event_type=EventType.TRANSLATION_STARTED,
            total_batches=3,
            stats=StatsSnapshot(
                total=23, processed=0, elapsed_seconds=0, throughput=0, progress_percent=0
            ),
        )

        data = event.model_dump(mode="json")

        assert data["event_type"] == "translation.started"
        assert data["batch_index"] is None
        assert data["timestamp"]

    def test_progress_percent_bounded(self):
        with pytest.raises(ValidationError):
            StatsSnapshot(
                total=1, processed=1, elapsed_seconds=1, throughput=1, progress_percent=101
            )


@pytest.mark.unit
class TestErrorTaxonomy:
    """Test error kinds and hierarchy."""

    def test_backend_errors_share_base(self):
        assert issubclass(InvalidAddressError, BackendError)
        assert issubclass(BackendForbiddenError, BackendResponseError)

    def test_kinds(self):
        assert InvalidAddressError("x").kind == ErrorKind.INVALID_ADDRESS
        assert BackendForbiddenError("http://h/api/generate").kind == ErrorKind.FORBIDDEN
        assert BackendResponseError("bad", status_code=500).kind == ErrorKind.UNREACHABLE

    def test_state_error_is_runtime_error(self):
        assert issubclass(OrchestratorStateError, RuntimeError)
