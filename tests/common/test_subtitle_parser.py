"""Tests for SRT parser, document model and batch planning."""

import pytest

from conftest import make_entries
from subbatch.common.exceptions import (
    ErrorKind,
    OrchestratorStateError,
    SubtitleParseError,
)
from subbatch.common.subtitle_parser import (
    DEFAULT_BATCH_SIZE,
    Batch,
    SRTParser,
    SubtitleDocument,
    SubtitleEntry,
    plan_batches,
)


class TestSubtitleEntry:
    """Test SubtitleEntry dataclass."""

    def test_subtitle_entry_str(self):
        """Test string representation of subtitle entry."""
        entry = SubtitleEntry(
            id="1",
            start_time="00:00:01,000",
            end_time="00:00:04,000",
            original_text="Hello, world!",
        )

        assert str(entry) == "1\n00:00:01,000 --> 00:00:04,000\nHello, world!\n"

    def test_display_text_prefers_translation(self):
        entry = SubtitleEntry("1", "00:00:01,000", "00:00:02,000", "こんにちは")
        assert entry.display_text == "こんにちは"

        entry.translated_text = "你好"
        assert entry.display_text == "你好"

    @pytest.mark.parametrize(
        "field_name", ["id", "start_time", "end_time", "original_text"]
    )
    def test_identity_fields_are_immutable(self, field_name):
        """Identifier, timestamps and original text cannot be reassigned."""
        entry = SubtitleEntry("1", "00:00:01,000", "00:00:02,000", "text")

        with pytest.raises(AttributeError):
            setattr(entry, field_name, "changed")

    def test_translated_text_is_mutable(self):
        entry = SubtitleEntry("1", "00:00:01,000", "00:00:02,000", "text")
        entry.translated_text = "first"
        entry.translated_text = "second"
        assert entry.translated_text == "second"


class TestSRTParser:
    """Test SRT parser functionality."""

    @pytest.fixture
    def multiline_srt_content(self):
        """Provide SRT content with multiline subtitles."""
        return """1
00:00:01,000 --> 00:00:04,000
This is a subtitle
with multiple lines

2
00:00:04,500 --> 00:00:08,000
Another one
"""

    def test_parse_simple_srt(self, simple_srt_content):
        """Test parsing simple SRT content."""
        entries = SRTParser.parse(simple_srt_content)

        assert len(entries) == 3
        assert entries[0].id == "1"
        assert entries[0].start_time == "00:00:01,000"
        assert entries[0].end_time == "00:00:04,000"
        assert entries[0].original_text == "こんにちは"
        assert entries[0].translated_text == ""

    def test_parse_multiline_srt(self, multiline_srt_content):
        """Multi-line text stays in a single entry."""
        entries = SRTParser.parse(multiline_srt_content)

        assert len(entries) == 2
        assert entries[0].original_text == "This is a subtitle\nwith multiple lines"

    def test_parse_crlf_and_bom(self):
        """Windows line endings and a UTF-8 BOM are tolerated."""
        content = "\ufeff1\r\n00:00:01,000 --> 00:00:02,000\r\nHi\r\n\r\n2\r\n00:00:03,000 --> 00:00:04,000\r\nBye\r\n"

        entries = SRTParser.parse(content)

        assert [e.id for e in entries] == ["1", "2"]
        assert [e.original_text for e in entries] == ["Hi", "Bye"]

    def test_parse_keeps_non_numeric_ids(self):
        content = "intro\n00:00:01,000 --> 00:00:02,000\nHello\n"

        entries = SRTParser.parse(content)

        assert entries[0].id == "intro"

    @pytest.mark.parametrize(
        "content,expected_count",
        [
            ("", 0),  # Empty content
            ("\n\n\n", 0),  # Only newlines
            ("1\n00:00:01,000 --> 00:00:04,000\nText\n", 1),  # Single entry
            ("1\n00:00:01,000 --> 00:00:04,000\n", 0),  # No text line
        ],
    )
    def test_parse_edge_cases(self, content, expected_count):
        """Test parsing edge cases."""
        assert len(SRTParser.parse(content)) == expected_count

    def test_parse_skips_invalid_timestamp(self):
        """Blocks with an invalid timing line are skipped, others kept."""
        content = """1
invalid timestamp
Some text

2
00:00:05,000 --> 00:00:06,000
Valid
"""
        entries = SRTParser.parse(content)

        assert len(entries) == 1
        assert entries[0].id == "2"

    def test_parse_document_raises_when_empty(self):
        """A document with no usable entries is a parse failure."""
        with pytest.raises(SubtitleParseError) as exc_info:
            SRTParser.parse_document("not a subtitle file")

        assert exc_info.value.kind == ErrorKind.DOCUMENT_PARSE_FAILURE
        assert isinstance(exc_info.value, ValueError)

    def test_format_uses_translation_when_present(self, simple_srt_content):
        """Translated text replaces original; untranslated entries keep original."""
        entries = SRTParser.parse(simple_srt_content)
        entries[0].translated_text = "你好"

        formatted = SRTParser.format(entries)

        assert formatted == (
            "1\n00:00:01,000 --> 00:00:04,000\n你好\n\n"
            "2\n00:00:04,500 --> 00:00:08,000\n今日は何を学びますか\n\n"
            "3\n00:00:08,500 --> 00:00:12,000\n始めましょう！\n"
        )

    def test_format_round_trips_parsed_content(self, simple_srt_content):
        formatted = SRTParser.format(SRTParser.parse(simple_srt_content))
        assert formatted == simple_srt_content

    def test_format_empty(self):
        assert SRTParser.format([]) == ""


class TestSubtitleDocument:
    """Test the document model."""

    def test_fixed_length_sequence(self, make_document):
        document = make_document(3)

        assert len(document) == 3
        assert [entry.id for entry in document] == ["1", "2", "3"]
        assert document[1].original_text == "line 2"
        assert not hasattr(document, "append")

    def test_texts_and_apply_translations(self, make_document):
        document = make_document(5)
        batch = Batch(index=0, start=1, end=4)

        assert document.texts(batch) == ["line 2", "line 3", "line 4"]

        document.apply_translations(batch, ["a", "b", "c"])

        assert [e.translated_text for e in document] == ["", "a", "b", "c", ""]
        assert document.translated_count == 3

    def test_apply_translations_overwrites(self, make_document):
        """Writing a batch twice keeps the latest values."""
        document = make_document(2)
        batch = Batch(index=0, start=0, end=2)

        document.apply_translations(batch, ["x", "y"])
        document.apply_translations(batch, ["x2", "y2"])

        assert [e.translated_text for e in document] == ["x2", "y2"]

    def test_apply_translations_rejects_wrong_length(self, make_document):
        document = make_document(3)

        with pytest.raises(ValueError):
            document.apply_translations(Batch(index=0, start=0, end=3), ["only one"])

    def test_preview_returns_latest_translated(self, make_document):
        document = make_document(8)
        document.apply_translations(Batch(0, 0, 4), ["t1", "t2", "t3", "t4"])

        preview = document.preview(limit=2)

        assert [entry.translated_text for entry in preview] == ["t3", "t4"]
        assert document.preview(limit=0) == []

    def test_claim_only_once(self, make_document):
        document = make_document(1)
        document.claim()

        assert document.claimed is True
        with pytest.raises(OrchestratorStateError):
            document.claim()

    def test_to_srt(self):
        document = SubtitleDocument(make_entries(2))
        document[0].translated_text = "LINE 1"

        srt = document.to_srt()

        assert "LINE 1" in srt
        assert "line 2" in srt


class TestBatchPlanning:
    """Test batch partitioning."""

    def test_default_batch_size(self):
        assert DEFAULT_BATCH_SIZE == 10

    def test_23_entries_make_three_batches(self):
        batches = plan_batches(23, 10)

        assert [batch.size for batch in batches] == [10, 10, 3]
        assert [batch.index for batch in batches] == [0, 1, 2]

    @pytest.mark.parametrize(
        "total,batch_size",
        [(0, 10), (1, 10), (10, 10), (11, 10), (23, 10), (7, 3), (5, 1)],
    )
    def test_batches_partition_document_in_order(self, total, batch_size):
        """Every index appears exactly once, in document order."""
        batches = plan_batches(total, batch_size)

        flattened = [i for batch in batches for i in batch.indices]
        assert flattened == list(range(total))
        assert all(0 < batch.size <= batch_size for batch in batches)

    def test_empty_document_has_no_batches(self):
        assert plan_batches(0, 10) == []

    @pytest.mark.parametrize("batch_size", [0, -1])
    def test_invalid_batch_size(self, batch_size):
        with pytest.raises(ValueError, match="batch_size must be at least 1"):
            plan_batches(5, batch_size)

