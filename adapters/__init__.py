"""
Adapters — thin wrappers around the outside world.

The only outside world here is HTTP.
"""
