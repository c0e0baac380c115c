"""File transfer actions: URL → chat attachment, chat attachment → public link."""

from filebot.transfer.download import PendingDownload, derive_filename, download_to_temp
from filebot.transfer.upload import extension_for_mimetype, public_link, save_upload

__all__ = [
    "PendingDownload",
    "derive_filename",
    "download_to_temp",
    "extension_for_mimetype",
    "public_link",
    "save_upload",
]
