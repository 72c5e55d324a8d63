"""
Tools — MCP tool implementations.

server.py and cli.py provide thin wrappers that call into these.
"""

from .fetch import do_fetch

__all__ = ["do_fetch"]
