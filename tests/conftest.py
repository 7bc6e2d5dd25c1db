"""Pytest configuration and shared fixtures."""

import json
import logging
import sys
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

# Add src directory to Python path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from subbatch.common.logging_config import PACKAGE_LOGGER_NAME  # noqa: E402
from subbatch.common.schemas import BackendConfig  # noqa: E402
from subbatch.common.subtitle_parser import (  # noqa: E402
    SubtitleDocument,
    SubtitleEntry,
)
from subbatch.translator.line_codec import SPLIT_DELIMITER  # noqa: E402

TEST_HOST = "http://ollama.test:11434"


def make_entries(count: int) -> List[SubtitleEntry]:
    """Build `count` entries with ids 1..count and text 'line N'."""
    return [
        SubtitleEntry(
            id=str(i),
            start_time=f"00:00:{i % 60:02d},000",
            end_time=f"00:00:{i % 60:02d},500",
            original_text=f"line {i}",
        )
        for i in range(1, count + 1)
    ]


def extract_input_lines(prompt: str) -> List[str]:
    """Recover the segment texts embedded after 'Input:' in a prompt."""
    payload = prompt.split("Input:\n", 1)[1]
    return [piece.strip() for piece in payload.split(SPLIT_DELIMITER)]


def uppercase_generate_handler(request: httpx.Request) -> httpx.Response:
    """Fake /api/generate that 'translates' by upper-casing each segment."""
    body = json.loads(request.content)
    translated = [text.upper() for text in extract_input_lines(body["prompt"])]
    return httpx.Response(
        200, json={"response": f"\n{SPLIT_DELIMITER}\n".join(translated)}
    )


@pytest.fixture
def make_document() -> Callable[[int], SubtitleDocument]:
    """Factory for documents of N generated entries."""

    def _make(count: int) -> SubtitleDocument:
        return SubtitleDocument(make_entries(count))

    return _make


@pytest.fixture
def backend_config():
    """Backend configuration pointing at the mocked host."""
    return BackendConfig(host=TEST_HOST, model="test-model")


@pytest.fixture
def tags_payload():
    """Sample /api/tags body."""
    return {
        "models": [
            {
                "name": "qwen2.5:7b",
                "modified_at": "2024-05-01T10:00:00Z",
                "size": 4683087332,
            },
            {
                "name": "llama3:8b",
                "modified_at": "2024-04-20T08:30:00Z",
                "size": 4661224676,
            },
        ]
    }


@pytest.fixture
def simple_srt_content():
    """Provide simple SRT content for testing."""
    return """1
00:00:01,000 --> 00:00:04,000
こんにちは

2
00:00:04,500 --> 00:00:08,000
今日は何を学びますか

3
00:00:08,500 --> 00:00:12,000
始めましょう！
"""


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo CLI logging setup so caplog sees package records."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
