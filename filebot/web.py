"""
Lightweight HTTP server for uploaded files and bot status.

Runs an aiohttp server on PORT (default 3000) alongside the Telegram bot
in the same asyncio event loop.

Endpoints:
  GET /                → HTML status page (Online / Offline, usage)
  GET /uploads/<file>  → files saved by !upload
  GET /health          → 200 {"status": "ok", "uptime_s": N}
  GET /ready           → 200 {"status": "ready"} or 503 {"status": "<state>"}
"""

import asyncio
import logging
import os
import time

from aiohttp import web

from .constants import UPLOADS_ROUTE
from .models import BotState, BotStatus

logger = logging.getLogger(__name__)

_START_TIME = time.monotonic()

STATE_KEY = web.AppKey("state", BotState)

_STATUS_PAGE = """\
<html>
  <head>
    <title>Telegram File Bot</title>
    <style>
      body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
      .status {{ padding: 10px; border-radius: 5px; margin: 10px 0; }}
      .online {{ background-color: #d4edda; color: #155724; }}
      .offline {{ background-color: #f8d7da; color: #721c24; }}
    </style>
  </head>
  <body>
    <h1>Telegram File Bot</h1>
    <div class="status {css}">
      Status: {label}
    </div>
    <p>This bot allows file downloads and uploads with direct links through Telegram.</p>
    <h2>Usage:</h2>
    <ul>
      <li>Send <code>!help</code> to the bot to see available commands</li>
      <li>Use <code>!download &lt;url&gt;</code> to download a file from a URL</li>
      <li>Reply to a file with <code>!upload</code> to get a direct download link</li>
    </ul>
    <h2>Owner Commands:</h2>
    <ul>
      <li><code>!addgroup</code> - Add current group to allowed list</li>
      <li><code>!removegroup</code> - Remove current group from allowed list</li>
      <li><code>!listgroups</code> - List all allowed groups</li>
      <li><code>!status</code> - Show bot status</li>
    </ul>
  </body>
</html>
"""


async def _handle_root(request: web.Request) -> web.Response:
    online = request.app[STATE_KEY].is_online
    page = _STATUS_PAGE.format(
        css="online" if online else "offline",
        label="Online" if online else "Offline",
    )
    return web.Response(text=page, content_type="text/html")


async def _handle_health(request: web.Request) -> web.Response:
    uptime = int(time.monotonic() - _START_TIME)
    return web.json_response({"status": "ok", "uptime_s": uptime})


async def _handle_ready(request: web.Request) -> web.Response:
    status = request.app[STATE_KEY].status
    if status is BotStatus.READY:
        return web.json_response({"status": "ready"})
    return web.json_response({"status": status.value}, status=503)


def create_app(state: BotState, uploads_dir: str) -> web.Application:
    os.makedirs(uploads_dir, exist_ok=True)
    app = web.Application()
    app[STATE_KEY] = state
    app.router.add_get("/", _handle_root)
    app.router.add_get("/health", _handle_health)
    app.router.add_get("/ready", _handle_ready)
    app.router.add_static(UPLOADS_ROUTE, uploads_dir, show_index=False)
    return app


async def run_web_server(state: BotState, uploads_dir: str, port: int = 3000) -> None:
    """
    Start the aiohttp server on the given port.
    Runs until cancelled. Call with asyncio.create_task().
    """
    app = create_app(state, uploads_dir)
    runner = web.AppRunner(app, access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, "0.0.0.0", port)

    try:
        await site.start()
        logger.info("Web server running on port %d", port)
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        logger.info("Web server shutting down")
    finally:
        await runner.cleanup()
