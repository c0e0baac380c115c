"""
Shared constants for filebot.

Centralises chat reply texts and command names so handlers, tests and the
status page stay consistent.
"""

# ── Command surface ─────────────────────────────────────────────────────────────
COMMAND_MARKER = "!"

# Sender/chat used by some platforms for status broadcasts; never a command source
BROADCAST_CHAT_ID = "status@broadcast"

UPLOADS_ROUTE = "/uploads"


# ── Standardised replies ────────────────────────────────────────────────────────
REPLIES = {
    "unknown_command": "Unknown command. Type !help for available commands.",
    "groups_only": "This command can only be used in groups.",
    "group_added": "This group has been added to the allowed list.",
    "group_removed": "This group has been removed from the allowed list.",
    "no_groups": "No groups are currently allowed.",
    "download_usage": "Please provide a URL. Usage: !download <url>",
    "downloading": "Downloading file...",
    "download_failed": "Failed to download the file. Please check the URL and try again.",
    "send_failed": "Failed to send the file. It might be too large or in an unsupported format.",
    "download_caption": "Here's your downloaded file: {filename}",
    "upload_usage": "Please reply to a file with this command to upload it.",
    "upload_no_media": "The quoted message does not contain a file.",
    "processing": "Processing file...",
    "media_fetch_failed": "Failed to download the file.",
    "upload_failed": "Failed to upload the file.",
    "upload_done": "File uploaded successfully!\nDirect download link: {link}",
    "online_notice": "Bot is now online and ready!",
    "command_failed": "Something went wrong while running that command.",
}


# ── Help text ───────────────────────────────────────────────────────────────────
HELP_TEXT = (
    "*Bot Commands:*\n\n"
    "*!download <url>* - Download file from URL\n"
    "*!upload* - Reply to a file with this command to get a direct download link\n"
)

OWNER_HELP_TEXT = (
    "\n*Owner Commands:*\n\n"
    "*!addgroup* - Add current group to allowed list\n"
    "*!removegroup* - Remove current group from allowed list\n"
    "*!listgroups* - List all allowed groups\n"
    "*!status* - Show bot status\n"
)
