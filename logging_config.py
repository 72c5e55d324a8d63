"""
Logging for pagefetch.

Simple setup that adapters and tools can import. Output goes to stderr:
stdout belongs to the MCP stdio transport (and to the CLI's payload).
Extractors and the converter never log (they're pure functions).
"""

import logging
import sys

# Create logger for the package
logger = logging.getLogger("pagefetch")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging for pagefetch.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logger.setLevel(getattr(logging, level.upper()))

    # Only add handler if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)

        # Concise format for MCP context
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)


# NOTE: Call configure_logging() explicitly in server.py or cli.py.
# Nothing is configured on import.


def log_fetch(url: str, **params: object) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logger.debug(f"GET {url} ({param_str})")


def log_fetch_result(url: str, status_code: int, char_count: int | None = None) -> None:
    if char_count is None:
        logger.debug(f"GET {url} -> {status_code}")
    else:
        logger.debug(f"GET {url} -> {status_code}, {char_count:,} chars")


def log_outcome(url: str, total_length: int, next_start_index: int | None) -> None:
    """One INFO line per successful tool call."""
    if next_start_index is None:
        logger.info(f"fetch {url}: {total_length:,} chars, complete")
    else:
        logger.info(f"fetch {url}: {total_length:,} chars, continues at {next_start_index}")
