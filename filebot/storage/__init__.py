"""Allow-list storage: in-memory set with a flat JSON file snapshot."""

from filebot.storage.allowlist import AllowList, AllowListBackend, JsonFileAllowListBackend

__all__ = ["AllowList", "AllowListBackend", "JsonFileAllowListBackend"]
