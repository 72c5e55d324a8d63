"""
pagefetch configuration - Single Source of Truth

All tunables defined here. Do not duplicate elsewhere.
Environment overrides are read once, at import.
"""

import os

# --- HTTP ---

# Upper bound on waiting for the target server (seconds)
HTTP_TIMEOUT = 30

# Identity when the fetch was decided by the model on its own
DEFAULT_USER_AGENT_AUTONOMOUS = os.environ.get(
    "PAGEFETCH_USER_AGENT",
    "ModelContextProtocol/1.0 (Autonomous; +https://github.com/modelcontextprotocol/servers)",
)

# Identity when a human asked for the URL (CLI)
DEFAULT_USER_AGENT_MANUAL = (
    "ModelContextProtocol/1.0 (User-Specified; +https://github.com/modelcontextprotocol/servers)"
)

ALLOWED_SCHEMES = ("http", "https")

# --- Tool contract ---

DEFAULT_MAX_LENGTH = 5000
MAX_LENGTH_LIMIT = 1_000_000

# --- Readability heuristics ---

# 0 means no ceiling on parsed elements
MAX_ELEMS_TO_PARSE = 0
NB_TOP_CANDIDATES = 5
CHAR_THRESHOLD = 500

# --- Logging ---

LOG_LEVEL = os.environ.get("PAGEFETCH_LOG_LEVEL", "INFO")
