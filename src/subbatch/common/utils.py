"""Utility functions for common operations across the application."""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class MathUtils:
    """Mathematical utility functions."""

    @staticmethod
    def calculate_percentage(completed: int, total: int) -> float:
        """
        Calculate the percentage of completed items out of total items.

        Args:
            completed: Number of completed items
            total: Total number of items

        Returns:
            Percentage as a float between 0 and 100

        Example:
            >>> MathUtils.calculate_percentage(5, 10)
            50.0
        """
        if total <= 0:
            return 0.0
        return (completed / total) * 100


class ValidationUtils:
    """Validation utility functions."""

    @staticmethod
    def is_valid_url_format(url: str) -> bool:
        """
        Basic URL format validation (scheme, host and port).

        Args:
            url: URL string to validate

        Returns:
            True if URL has valid format, False otherwise

        Example:
            >>> ValidationUtils.is_valid_url_format("http://127.0.0.1:11434")
            True
            >>> ValidationUtils.is_valid_url_format("http://")
            False
            >>> ValidationUtils.is_valid_url_format("ftp://example.com")
            False
        """
        if not isinstance(url, str) or not url.strip():
            return False

        # Whitespace inside an address is never valid
        if any(ch.isspace() for ch in url):
            return False

        try:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https"):
                return False
            if not parsed.hostname:
                return False
            # Accessing .port validates it (raises ValueError when out of range)
            _ = parsed.port
            return True
        except ValueError:
            return False


class URLUtils:
    """URL utility functions."""

    # Full-width colon typed by CJK input methods
    FULL_WIDTH_COLON = "\uff1a"
    SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

    @staticmethod
    def normalize_host(address: str) -> str:
        """
        Normalize a user-entered backend address.

        Trims whitespace, replaces full-width colons with ASCII colons, strips
        one trailing slash and prepends http:// when no scheme is present.
        The input string is not modified.

        Args:
            address: Raw address as typed by the user

        Returns:
            Normalized base URL

        Example:
            >>> URLUtils.normalize_host("127.0.0.1:11434")
            'http://127.0.0.1:11434'
            >>> URLUtils.normalize_host("http://host/")
            'http://host'
        """
        cleaned = address.strip()
        cleaned = cleaned.replace(URLUtils.FULL_WIDTH_COLON, ":")
        if cleaned.endswith("/"):
            cleaned = cleaned[:-1]

        if not URLUtils.SCHEME_PATTERN.match(cleaned):
            cleaned = f"http://{cleaned}"
        return cleaned

    @staticmethod
    def join(base_url: str, path: str) -> str:
        """Join a normalized base URL and an absolute API path."""
        return f"{base_url}/{path.lstrip('/')}"


class DateTimeUtils:
    """Date and time utility functions."""

    @staticmethod
    def get_current_utc_datetime() -> datetime:
        """
        Get the current UTC datetime.

        Returns:
            Current datetime in UTC timezone
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def get_date_string_for_log_file() -> str:
        """
        Get a date string suitable for log file names.

        Returns:
            Date string in YYYYMMDD format
        """
        return datetime.now().strftime("%Y%m%d")

    @staticmethod
    def format_duration(seconds: float) -> str:
        """
        Format an elapsed duration for display.

        Example:
            >>> DateTimeUtils.format_duration(75.25)
            '1m 15.2s'
            >>> DateTimeUtils.format_duration(4.0)
            '4.0s'
        """
        if seconds < 0:
            seconds = 0.0
        minutes, remainder = divmod(seconds, 60)
        if minutes >= 1:
            return f"{int(minutes)}m {remainder:.1f}s"
        return f"{remainder:.1f}s"


class PathUtils:
    """Path manipulation utility functions."""

    @staticmethod
    def generate_translated_path(source_subtitle_path: str, suffix: str) -> Path:
        """
        Generate the output path for a translated subtitle file.

        The suffix is inserted before the .srt extension.

        Args:
            source_subtitle_path: Path to source subtitle file (e.g., '/path/video.srt')
            suffix: Suffix to insert (e.g., '.cn')

        Returns:
            Path for the translated file (e.g., '/path/video.cn.srt')

        Raises:
            ValueError: If source_subtitle_path is empty

        Example:
            >>> PathUtils.generate_translated_path('/path/video.srt', '.cn')
            PosixPath('/path/video.cn.srt')
        """
        if not source_subtitle_path:
            raise ValueError("source_subtitle_path cannot be empty")

        source_path = Path(source_subtitle_path)

        if source_path.suffix.lower() == ".srt":
            base_name = source_path.stem
        else:
            base_name = source_path.name

        if suffix and not suffix.startswith("."):
            suffix = f".{suffix}"

        return source_path.parent / f"{base_name}{suffix}.srt"
