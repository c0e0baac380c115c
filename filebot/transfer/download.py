"""
Fetch a URL into a scoped temporary directory.

download_to_temp() is an async context manager: the file exists for the
duration of the `async with` block and the directory holding it is removed
on every exit path, whether the relay that follows succeeds or not.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator
from urllib.parse import unquote, urlsplit

import aiofiles
import httpx

from ..constants import REPLIES
from ..exceptions import TransportError

logger = logging.getLogger(__name__)

_DEFAULT_FILENAME = "download"

# RFC 6266 / 5987: filename*=UTF-8''na%C3%AFve.txt
_CD_FILENAME_EXT_RE = re.compile(r"filename\*\s*=\s*([\w-]*)'[^']*'([^;]+)", re.IGNORECASE)
_CD_FILENAME_RE = re.compile(r'filename\s*=\s*"?([^";]+)"?', re.IGNORECASE)


@dataclass
class PendingDownload:
    url: str
    path: str
    filename: str


def _safe_filename(name: str) -> str:
    """Reduce to a bare basename so it cannot escape the target directory."""
    name = os.path.basename(name.replace("\\", "/")).strip()
    if name in ("", ".", ".."):
        return _DEFAULT_FILENAME
    return name


def filename_from_content_disposition(header: str | None) -> str | None:
    if not header:
        return None
    match = _CD_FILENAME_EXT_RE.search(header)
    if match:
        charset = match.group(1) or "utf-8"
        try:
            return unquote(match.group(2).strip(), encoding=charset)
        except LookupError:
            return unquote(match.group(2).strip())
    match = _CD_FILENAME_RE.search(header)
    if match:
        return match.group(1).strip()
    return None


def derive_filename(url: str, content_disposition: str | None = None) -> str:
    """Last URL path segment, overridden by a Content-Disposition filename."""
    from_header = filename_from_content_disposition(content_disposition)
    if from_header:
        return _safe_filename(from_header)
    segment = urlsplit(url).path.rsplit("/", 1)[-1]
    return _safe_filename(unquote(segment))


@asynccontextmanager
async def download_to_temp(
    url: str,
    temp_root: str,
    *,
    timeout: float = 120.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[PendingDownload]:
    """
    Stream `url` to disk and yield the resulting PendingDownload.

    Raises TransportError (with the user-facing download failure text) when
    the request fails, returns a non-2xx status, or the body cannot be written.
    """
    try:
        os.makedirs(temp_root, exist_ok=True)
        tmpdir = tempfile.mkdtemp(prefix="dl-", dir=temp_root)
    except OSError as e:
        logger.error("Cannot create temp directory under %s: %s", temp_root, e)
        raise TransportError(REPLIES["download_failed"]) from e

    try:
        try:
            async with httpx.AsyncClient(
                timeout=timeout, follow_redirects=True, transport=transport
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    filename = derive_filename(url, response.headers.get("content-disposition"))
                    path = os.path.join(tmpdir, filename)
                    async with aiofiles.open(path, mode="wb") as f:
                        async for chunk in response.aiter_bytes():
                            await f.write(chunk)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            logger.error("Error downloading %s: %s", url, e)
            raise TransportError(REPLIES["download_failed"]) from e

        logger.info("Downloaded %s → %s (%d bytes)", url, filename, os.path.getsize(path))
        yield PendingDownload(url=url, path=path, filename=filename)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)
