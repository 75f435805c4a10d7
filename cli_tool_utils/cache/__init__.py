"""Module de cache borné avec expiration."""

from cli_tool_utils.cache.ttl_cache import TTLCache

__all__ = ["TTLCache"]
