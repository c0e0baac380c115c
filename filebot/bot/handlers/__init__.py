"""
Chat command handlers.

Every handler has the signature `async (ctx, args) -> None` and replies through
`ctx.reply`. Owner-only commands are wrapped with `owner_only`, group-only ones
with `groups_only`.

Modules:
  - base: authorization predicate and access guards
  - core: help, status
  - groups: addgroup, removegroup, listgroups
  - files: download, upload
"""

from __future__ import annotations

import httpx

from .base import is_authorized, owner_only, groups_only
from .core import make_core_handlers
from .files import make_file_handlers
from .groups import make_group_handlers


def make_handlers(
    *,
    uploads_dir: str,
    temp_dir: str,
    base_url: str,
    download_timeout: float = 120.0,
    transport: httpx.AsyncBaseTransport | None = None,
):
    """
    Factory that returns the full command registry: name -> handler.
    Register the result with a CommandDispatcher.
    """
    handlers = {}

    handlers.update(make_core_handlers())
    handlers.update(make_group_handlers())
    handlers.update(make_file_handlers(
        uploads_dir=uploads_dir,
        temp_dir=temp_dir,
        base_url=base_url,
        download_timeout=download_timeout,
        transport=transport,
    ))

    return handlers


__all__ = [
    "make_handlers",
    "is_authorized",
    "owner_only",
    "groups_only",
]
