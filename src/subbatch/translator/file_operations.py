"""File I/O operations for subtitle files."""

import logging
from pathlib import Path
from typing import Optional, Union

from subbatch.common.config import settings
from subbatch.common.exceptions import SubtitleParseError
from subbatch.common.subtitle_parser import SRTParser, SubtitleDocument
from subbatch.common.utils import PathUtils

logger = logging.getLogger(__name__)


def read_and_parse_subtitle_file(
    subtitle_file_path: Union[str, Path],
) -> SubtitleDocument:
    """
    Read and parse subtitle file from disk.

    Args:
        subtitle_file_path: Path to subtitle file

    Returns:
        SubtitleDocument ready for translation

    Raises:
        FileNotFoundError: If subtitle file doesn't exist
        SubtitleParseError: If the file is not UTF-8 text or contains no entries
    """
    logger.info(f"Reading subtitle file: {subtitle_file_path}")

    subtitle_path = Path(subtitle_file_path)
    if not subtitle_path.exists():
        raise FileNotFoundError(f"Subtitle file not found: {subtitle_file_path}")

    try:
        srt_content = subtitle_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SubtitleParseError(
            f"Subtitle file is not valid UTF-8: {subtitle_file_path}"
        ) from e
    logger.info(f"Read {len(srt_content)} characters from subtitle file")

    document = SRTParser.parse_document(srt_content)
    logger.info(f"Parsed {len(document)} subtitle entries")
    return document


def save_translated_file(
    document: SubtitleDocument,
    subtitle_file_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    suffix: Optional[str] = None,
) -> Path:
    """
    Save a translated document next to its source file.

    Args:
        document: Document with translated text written in place
        subtitle_file_path: Path to source subtitle file
        output_path: Explicit destination; derived from the source when omitted
        suffix: Suffix inserted before .srt (defaults to settings)

    Returns:
        Path to saved translated file
    """
    translated_srt = document.to_srt()

    if output_path is None:
        output_path = PathUtils.generate_translated_path(
            str(subtitle_file_path),
            settings.translation_output_suffix if suffix is None else suffix,
        )
    output_path = Path(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(translated_srt, encoding="utf-8")
    logger.info(f"✅ Saved translated subtitle to: {output_path}")
    logger.info(f"   File size: {output_path.stat().st_size} bytes")

    return output_path
