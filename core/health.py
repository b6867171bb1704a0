"""
Liveness endpoint for external uptime monitors.

Runs an aiohttp server on the bot's own event loop with a single route.
"""

import logging
from typing import Optional

from aiohttp import web

logger = logging.getLogger(__name__)

HEALTH_BODY = "Bot is running!"


async def health_check(request: web.Request) -> web.Response:
    return web.Response(text=HEALTH_BODY, status=200)


def create_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", health_check)
    return app


async def start_health_server(port: int, host: str = "0.0.0.0") -> Optional[web.AppRunner]:
    """
    Start the liveness server in the background.

    Returns the runner so the caller can clean it up, or None if the
    server could not bind. A failure here never stops the bot.
    """
    runner = web.AppRunner(create_app())
    try:
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        await site.start()
    except OSError as e:
        logger.error(f"Failed to start health server on port {port}: {e}")
        await runner.cleanup()
        return None

    logger.info(f"Health server listening on {host}:{port}")
    return runner
