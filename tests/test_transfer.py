"""Tests for filebot/transfer — filename derivation, temp download scope, upload naming."""

import os

import httpx
import pytest

from filebot.constants import REPLIES
from filebot.exceptions import TransportError
from filebot.models import MediaPayload
from filebot.transfer.download import (
    derive_filename,
    download_to_temp,
    filename_from_content_disposition,
)
from filebot.transfer.upload import (
    extension_for_mimetype,
    make_upload_filename,
    public_link,
    save_upload,
)


# --------------------------------------------------------------------------- #
# Filenames                                                                    #
# --------------------------------------------------------------------------- #

def test_filename_from_url_path():
    assert derive_filename("https://example.com/files/a.txt") == "a.txt"


def test_filename_ignores_query_string():
    assert derive_filename("https://example.com/a.txt?token=abc") == "a.txt"


def test_filename_is_percent_decoded():
    assert derive_filename("https://example.com/my%20file.zip") == "my file.zip"


def test_filename_fallback_for_bare_host():
    assert derive_filename("https://example.com/") == "download"
    assert derive_filename("https://example.com") == "download"


def test_content_disposition_overrides_url():
    header = 'attachment; filename="real.pdf"'
    assert derive_filename("https://example.com/get", header) == "real.pdf"


def test_content_disposition_unquoted():
    assert filename_from_content_disposition("attachment; filename=plain.txt") == "plain.txt"


def test_content_disposition_extended_value_wins():
    header = "attachment; filename=\"fallback.txt\"; filename*=UTF-8''na%C3%AFve.txt"
    assert filename_from_content_disposition(header) == "naïve.txt"


def test_content_disposition_without_filename():
    assert filename_from_content_disposition("inline") is None
    assert filename_from_content_disposition(None) is None


def test_content_disposition_cannot_escape_directory():
    header = 'attachment; filename="../../etc/passwd"'
    assert derive_filename("https://example.com/x", header) == "passwd"
    assert derive_filename("https://example.com/x", 'attachment; filename="..\\evil.exe"') == "evil.exe"


# --------------------------------------------------------------------------- #
# download_to_temp                                                             #
# --------------------------------------------------------------------------- #

@pytest.mark.asyncio
async def test_download_to_temp_scope(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"abc"))
    async with download_to_temp(
        "https://example.com/a.txt", str(tmp_path), transport=transport
    ) as pending:
        assert pending.filename == "a.txt"
        assert pending.url == "https://example.com/a.txt"
        with open(pending.path, "rb") as f:
            assert f.read() == b"abc"
    assert not os.path.exists(pending.path)
    assert os.listdir(tmp_path) == []


@pytest.mark.asyncio
async def test_download_to_temp_cleans_up_when_body_raises(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"abc"))
    with pytest.raises(RuntimeError):
        async with download_to_temp(
            "https://example.com/a.txt", str(tmp_path), transport=transport
        ) as pending:
            raise RuntimeError("relay failed")
    assert not os.path.exists(pending.path)
    assert os.listdir(tmp_path) == []


@pytest.mark.asyncio
async def test_download_to_temp_follows_redirects(tmp_path):
    def handler(request):
        if request.url.path == "/old":
            return httpx.Response(302, headers={"Location": "https://example.com/new.bin"})
        return httpx.Response(200, content=b"moved")

    transport = httpx.MockTransport(handler)
    async with download_to_temp(
        "https://example.com/old", str(tmp_path), transport=transport
    ) as pending:
        with open(pending.path, "rb") as f:
            assert f.read() == b"moved"


@pytest.mark.asyncio
async def test_download_to_temp_server_error(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    with pytest.raises(TransportError):
        async with download_to_temp("https://example.com/a.txt", str(tmp_path), transport=transport):
            pytest.fail("body must not run")
    assert os.listdir(tmp_path) == []


@pytest.mark.asyncio
async def test_download_to_temp_unwritable_temp_root(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    transport = httpx.MockTransport(lambda request: pytest.fail("no request expected"))

    with pytest.raises(TransportError) as exc_info:
        async with download_to_temp(
            "https://example.com/a.txt", str(blocker / "temp"), transport=transport
        ):
            pytest.fail("body must not run")
    assert str(exc_info.value) == REPLIES["download_failed"]


# --------------------------------------------------------------------------- #
# Upload naming                                                               #
# --------------------------------------------------------------------------- #

@pytest.mark.parametrize("mimetype, expected", [
    ("application/pdf", "pdf"),
    ("image/png", "png"),
    ("text/plain", "plain"),
    ("image/jpeg", "jpeg"),
    ("image/svg+xml", "svg"),
    ("application/pdf; charset=binary", "pdf"),
    ("application/x-made-up-type", "xmadeuptype"),
    ("", "bin"),
])
def test_extension_for_mimetype(mimetype, expected):
    assert extension_for_mimetype(mimetype) == expected


def test_upload_filename_uses_timestamp():
    assert make_upload_filename("application/pdf", timestamp_ns=1700000000123456789) == (
        "file-1700000000123456789.pdf"
    )


def test_upload_filenames_are_distinct():
    assert make_upload_filename("image/png") != make_upload_filename("image/png", timestamp_ns=1)


def test_public_link_joins_base_url():
    assert public_link("http://localhost:3000", "file-1.pdf") == "http://localhost:3000/uploads/file-1.pdf"
    assert public_link("https://cdn.example.org/", "file-1.pdf") == "https://cdn.example.org/uploads/file-1.pdf"


@pytest.mark.asyncio
async def test_save_upload_creates_directory(tmp_path):
    uploads = tmp_path / "public" / "uploads"
    payload = MediaPayload(data=b"\x89PNG", mimetype="image/png")
    filename = await save_upload(payload, str(uploads))
    assert filename.endswith(".png")
    assert (uploads / filename).read_bytes() == b"\x89PNG"
