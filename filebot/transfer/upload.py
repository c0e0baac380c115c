"""Save a received attachment under the public uploads directory and mint its link."""

from __future__ import annotations

import logging
import os
import re
import time

import aiofiles

from ..constants import UPLOADS_ROUTE
from ..models import MediaPayload

logger = logging.getLogger(__name__)

_FALLBACK_EXTENSION = "bin"
_EXT_CHARS_RE = re.compile(r"[^A-Za-z0-9]+")


def extension_for_mimetype(mimetype: str) -> str:
    """
    File extension (without dot) for a MIME type: the subtype as sent.

    "image/jpeg" gives "jpeg" and "text/plain" gives "plain". Parameters and
    structured-syntax suffixes are dropped, and anything outside [A-Za-z0-9]
    is removed so the name stays safe on disk ("application/x-foo" → "xfoo").
    """
    base = (mimetype or "").split(";", 1)[0].strip().lower()
    if "/" in base:
        subtype = base.split("/", 1)[1].split("+", 1)[0]
        cleaned = _EXT_CHARS_RE.sub("", subtype)
        if cleaned:
            return cleaned
    return _FALLBACK_EXTENSION


def make_upload_filename(mimetype: str, timestamp_ns: int | None = None) -> str:
    ts = timestamp_ns if timestamp_ns is not None else time.time_ns()
    return f"file-{ts}.{extension_for_mimetype(mimetype)}"


async def save_upload(payload: MediaPayload, uploads_dir: str) -> str:
    """Write payload bytes into uploads_dir. Returns the generated filename."""
    os.makedirs(uploads_dir, exist_ok=True)
    filename = make_upload_filename(payload.mimetype)
    path = os.path.join(uploads_dir, filename)
    async with aiofiles.open(path, mode="wb") as f:
        await f.write(payload.data)
    logger.info("Saved upload %s (%s, %d bytes)", filename, payload.mimetype, len(payload.data))
    return filename


def public_link(base_url: str, filename: str) -> str:
    return f"{base_url.rstrip('/')}{UPLOADS_ROUTE}/{filename}"
