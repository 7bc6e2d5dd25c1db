"""String manipulation utilities."""


def truncate_for_logging(
    text: str, max_length: int = 1000, edge_length: int = 500
) -> str:
    """
    Truncate text for logging, showing beginning and end.

    Long backend responses are truncated to show the first and last portions,
    with an ellipsis in the middle.

    Args:
        text: Text to truncate
        max_length: Maximum length before truncation is applied
        edge_length: Number of characters to show from start and end

    Returns:
        Truncated text with ellipsis if needed, or original text if short enough

    Examples:
        >>> truncate_for_logging("Hello", max_length=100)
        'Hello'
        >>> "..." in truncate_for_logging("x" * 2000, max_length=1000, edge_length=10)
        True
    """
    if len(text) <= max_length:
        return text
    return f"{text[:edge_length]}...\n...{text[-edge_length:]}"


def describe_line_range(start: int, end: int) -> str:
    """
    Describe a half-open index range as 1-based line numbers.

    Example:
        >>> describe_line_range(0, 10)
        'lines 1 to 10'
    """
    return f"lines {start + 1} to {end}"
