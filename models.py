"""
Type definitions for pagefetch.

Dataclasses defining the contracts between layers:
- Adapters produce these structures from HTTP responses
- Extractors consume them and return content
- Tools wire everything together

These types make the adapter→extractor contract explicit and IDE-checkable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ============================================================================
# ERROR TYPES
# ============================================================================

class ErrorKind(Enum):
    """Categories of errors for consistent handling."""
    INVALID_INPUT = "invalid_input"      # Malformed URL, bad scheme, bad window
    TIMEOUT = "timeout"                  # Request timed out
    NETWORK_ERROR = "network_error"      # Connection failed, too many redirects
    HTTP_STATUS = "http_status"          # Non-2xx response
    EXTRACTION_FAILED = "extraction_failed"  # Couldn't process content
    UNKNOWN = "unknown"                  # Unexpected error


class MiseError(Exception):
    """
    Structured error for consistent handling across layers.

    Adapters and extractors raise these.
    The tool layer catches them and formats a single outcome.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}


# ============================================================================
# WEB TYPES
# ============================================================================

@dataclass(frozen=True)
class WebData:
    """
    One retrieved resource.

    Adapter fetches the URL and assembles this structure once per call.
    Classifier and extractor read it; nothing writes it back.
    """
    url: str
    raw_text: str
    final_url: str  # After redirects
    status_code: int
    content_type: str  # "" when the server declared none

    # Warnings during fetch (redirects, etc.)
    warnings: tuple[str, ...] = ()


class ContentKind(Enum):
    """How the retrieved payload should be treated."""
    MARKUP = "markup"
    OTHER = "other"


@dataclass
class ExtractedContent:
    """
    Result of the readability pass.

    extraction_succeeded=False is a normal outcome: the page had no block of
    text long enough to count as primary content. body is then empty.
    """
    body: str  # Serialized HTML of the article subtree
    extraction_succeeded: bool
    title: str = ""
    text_length: int = 0
    # The article as a bs4 Tag, for the converter; None when extraction failed
    article: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class RenderedContent:
    """Page text ready for pagination, plus what the tool reports beside it."""
    text: str
    prefix: str = ""  # Emitted before the first window only
    title: str = ""   # Document <title>, markup pages only


# ============================================================================
# PAGINATION TYPES
# ============================================================================

@dataclass(frozen=True)
class PaginationWindow:
    """Caller-supplied window. Range checks belong to the tool contract."""
    start_index: int = 0
    max_length: int = 5000


@dataclass(frozen=True)
class PaginatedOutput:
    """One window of rendered text."""
    slice: str
    next_start_index: int | None = None
    exhausted: bool = False  # slice is the "no more content" sentinel

    @property
    def has_more(self) -> bool:
        return self.next_start_index is not None


# ============================================================================
# TOOL RESPONSE TYPES
# ============================================================================

@dataclass
class FetchOutcome:
    """Exactly one outcome per tool call: text plus the failure indicator."""
    text: str
    is_error: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"text": self.text, "error": self.is_error}
        if self.metadata:
            result["metadata"] = self.metadata
        return result
