"""
Offset-windowed pagination over rendered text.

Pure functions. The caller (tool layer) enforces the window contract
(start_index >= 0, 1 <= max_length <= 1_000_000); nothing is clamped here.
"""

from models import PaginatedOutput

__all__ = [
    "paginate",
    "render_window",
    "continuation_notice",
    "NO_MORE_CONTENT",
]

# Returned in place of a slice once the text is used up. Not an error.
NO_MORE_CONTENT = "<error>No more content available.</error>"


def continuation_notice(next_start_index: int) -> str:
    """Literal instruction telling the caller where the next window begins."""
    return (
        f"<error>Content truncated. Call the fetch tool with a start_index of "
        f"{next_start_index} to get more content.</error>"
    )


def paginate(text: str, start_index: int, max_length: int) -> PaginatedOutput:
    """
    Cut one window out of text.

    A continuation is attached only when the window came back full and
    text remains after it:
        len(slice) == max_length and start_index + len(slice) < len(text)

    Args:
        text: Full rendered text
        start_index: Offset of the first character to return
        max_length: Largest slice to return

    Returns:
        PaginatedOutput; exhausted=True with the sentinel as slice when
        start_index is at or past the end
    """
    total = len(text)
    if start_index >= total:
        return PaginatedOutput(slice=NO_MORE_CONTENT, exhausted=True)

    window = text[start_index:start_index + max_length]
    if not window:
        return PaginatedOutput(slice=NO_MORE_CONTENT, exhausted=True)

    next_start: int | None = None
    consumed = start_index + len(window)
    if len(window) == max_length and consumed < total:
        next_start = consumed

    return PaginatedOutput(slice=window, next_start_index=next_start)


def render_window(output: PaginatedOutput) -> str:
    """Slice text plus the continuation instruction when one applies."""
    if not output.has_more:
        return output.slice
    return f"{output.slice}\n\n{continuation_notice(output.next_start_index)}"
