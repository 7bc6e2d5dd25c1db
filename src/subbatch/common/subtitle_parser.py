"""SRT subtitle parser, document model and batch planning."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence

from subbatch.common.exceptions import OrchestratorStateError, SubtitleParseError

logger = logging.getLogger(__name__)

# Default number of subtitle entries sent to the backend in a single call
DEFAULT_BATCH_SIZE = 10

# Fields fixed once an entry has been created
_IMMUTABLE_ENTRY_FIELDS = frozenset({"id", "start_time", "end_time", "original_text"})


@dataclass
class SubtitleEntry:
    """
    Represents a single subtitle entry with timing, original and translated text.

    The identifier, timestamps and original text are fixed after creation;
    only translated_text may change.
    """

    id: str
    start_time: str
    end_time: str
    original_text: str
    translated_text: str = ""

    def __setattr__(self, name, value):
        if name in _IMMUTABLE_ENTRY_FIELDS and name in self.__dict__:
            raise AttributeError(f"SubtitleEntry.{name} is immutable")
        super().__setattr__(name, value)

    @property
    def display_text(self) -> str:
        """Translated text when present, else the original."""
        return self.translated_text or self.original_text

    def __str__(self) -> str:
        """Format entry as SRT block."""
        return f"{self.id}\n{self.start_time} --> {self.end_time}\n{self.display_text}\n"


@dataclass(frozen=True)
class Batch:
    """A contiguous half-open window [start, end) of document indices."""

    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start

    @property
    def indices(self) -> range:
        return range(self.start, self.end)


class SubtitleDocument:
    """
    Ordered, fixed-length sequence of subtitle entries.

    Entries cannot be inserted or removed once the document is created.
    """

    def __init__(self, entries: Iterable[SubtitleEntry]):
        self._entries = tuple(entries)
        self._claimed = False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SubtitleEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> SubtitleEntry:
        return self._entries[index]

    @property
    def entries(self) -> Sequence[SubtitleEntry]:
        return self._entries

    @property
    def claimed(self) -> bool:
        """Whether a translation run has been bound to this document."""
        return self._claimed

    def claim(self) -> None:
        """
        Bind the document to a translation run.

        Raises:
            OrchestratorStateError: If a run was already bound
        """
        if self._claimed:
            raise OrchestratorStateError(
                "Document already has a translation run; parse a new document to start another"
            )
        self._claimed = True

    def texts(self, batch: Batch) -> List[str]:
        """Original text of every entry in the batch, in order."""
        return [entry.original_text for entry in self._entries[batch.start : batch.end]]

    def apply_translations(self, batch: Batch, translations: Sequence[str]) -> None:
        """
        Write translated text into the batch's entries, overwriting prior values.

        Args:
            batch: Window to write into
            translations: One string per entry in the batch

        Raises:
            ValueError: If the number of translations differs from the batch size
        """
        if len(translations) != batch.size:
            raise ValueError(
                f"Expected {batch.size} translations for batch {batch.index + 1}, "
                f"got {len(translations)}"
            )
        for entry, text in zip(self._entries[batch.start : batch.end], translations):
            entry.translated_text = text

    @property
    def translated_count(self) -> int:
        return sum(1 for entry in self._entries if entry.translated_text)

    def preview(self, limit: int = 5) -> List[SubtitleEntry]:
        """
        Return the most recently translated entries, in document order.

        Batches are written sequentially, so the last translated entries are
        the newest ones.
        """
        if limit < 1:
            return []
        translated = [entry for entry in self._entries if entry.translated_text]
        return translated[-limit:]

    def to_srt(self) -> str:
        return SRTParser.format(self._entries)


class SRTParser:
    """Parser for SRT subtitle files."""

    # SRT timestamp format: HH:MM:SS,mmm --> HH:MM:SS,mmm
    TIMESTAMP_PATTERN = re.compile(
        r"(\d{2}:\d{2}:\d{2},\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2},\d{3})"
    )
    BLOCK_SEPARATOR = re.compile(r"\n[ \t]*\n")

    @staticmethod
    def parse(content: str) -> List[SubtitleEntry]:
        """
        Parse SRT content into subtitle entries.

        Malformed blocks are skipped with a warning.

        Args:
            content: Raw SRT file content

        Returns:
            List of SubtitleEntry objects in source order
        """
        # Remove BOM (Byte Order Mark) if present (common in UTF-8 files)
        if content.startswith("\ufeff"):
            content = content[1:]

        # Normalize line endings
        normalized = content.replace("\r\n", "\n").replace("\r", "\n")

        entries = []
        for block_number, block in enumerate(
            SRTParser.BLOCK_SEPARATOR.split(normalized), 1
        ):
            block = block.strip()
            if not block:
                continue

            lines = block.split("\n")
            if len(lines) < 3:
                logger.warning(
                    f"Skipping block {block_number}: expected index, timing and text lines"
                )
                continue

            timestamp_match = SRTParser.TIMESTAMP_PATTERN.search(lines[1])
            if not timestamp_match:
                logger.warning(
                    f"Invalid timestamp format in block {block_number}: {lines[1]}"
                )
                continue

            entries.append(
                SubtitleEntry(
                    id=lines[0].strip(),
                    start_time=timestamp_match.group(1),
                    end_time=timestamp_match.group(2),
                    original_text="\n".join(line.rstrip() for line in lines[2:]),
                )
            )

        logger.info(f"Parsed {len(entries)} subtitle entries")
        return entries

    @staticmethod
    def parse_document(content: str) -> SubtitleDocument:
        """
        Parse SRT content into a document ready for translation.

        Args:
            content: Raw SRT file content

        Returns:
            SubtitleDocument with at least one entry

        Raises:
            SubtitleParseError: If no subtitle entries could be parsed
        """
        entries = SRTParser.parse(content)
        if not entries:
            raise SubtitleParseError("No subtitle entries found in content")
        return SubtitleDocument(entries)

    @staticmethod
    def format(entries: Iterable[SubtitleEntry]) -> str:
        """
        Format subtitle entries back to SRT with proper spacing.

        Uses translated text when present, else the original text. Entries
        are separated by one blank line, with a single trailing newline.

        Args:
            entries: Subtitle entries in document order

        Returns:
            Formatted SRT content string
        """
        blocks = [str(entry).rstrip("\n") for entry in entries]
        if not blocks:
            return ""
        return "\n\n".join(blocks) + "\n"


def plan_batches(total: int, batch_size: int = DEFAULT_BATCH_SIZE) -> List[Batch]:
    """
    Split a document of `total` entries into contiguous batches.

    Every index belongs to exactly one batch, and batches follow document order.

    Args:
        total: Number of entries in the document
        batch_size: Maximum entries per batch (must be positive)

    Returns:
        List of Batch windows

    Raises:
        ValueError: If batch_size is less than 1 or total is negative
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    if total < 0:
        raise ValueError(f"total must not be negative, got {total}")

    batches = [
        Batch(index=batch_index, start=start, end=min(start + batch_size, total))
        for batch_index, start in enumerate(range(0, total, batch_size))
    ]

    logger.debug(f"Split {total} entries into {len(batches)} batches")
    return batches
