"""Health check endpoints for the streaming service."""

import logging
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web, web_request
from aiohttp.web_response import Response

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthCheckHandler:
    """Health check HTTP handler."""

    def __init__(self, service):
        self.service = service

    async def health(self, request: web_request.Request) -> Response:
        """Full health report; 503 unless healthy."""
        try:
            health_data = await self.service.health_check()
            status = 200 if health_data["status"] == "healthy" else 503
            return web.json_response(health_data, status=status)

        except Exception as e:
            logger.error(f"Health check failed: {e}", exc_info=True)
            return web.json_response(
                {
                    "service": "clob-stream",
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": _now()
                },
                status=503
            )

    async def ready(self, request: web_request.Request) -> Response:
        """Readiness check; a reconnecting stream is still ready."""
        try:
            health_data = await self.service.health_check()
            is_ready = health_data["status"] in ["healthy", "degraded"]
            return web.json_response(
                {
                    "ready": is_ready,
                    "status": health_data["status"],
                    "timestamp": _now()
                },
                status=200 if is_ready else 503
            )

        except Exception as e:
            logger.error(f"Readiness check failed: {e}", exc_info=True)
            return web.json_response(
                {"ready": False, "error": str(e), "timestamp": _now()},
                status=503
            )

    async def live(self, request: web_request.Request) -> Response:
        """Liveness check."""
        return web.json_response({"alive": True, "timestamp": _now()}, status=200)

    async def feed_health(self, request: web_request.Request) -> Response:
        """Health of a single feed; 404 for a feed the service does not run."""
        feed = request.match_info["feed"]
        health_data = await self.service.health_check()
        component = health_data["components"].get(feed)
        if component is None:
            return web.json_response(
                {"feed": feed, "error": "unknown feed", "timestamp": _now()},
                status=404
            )

        return web.json_response(
            {"feed": feed, **component, "timestamp": _now()},
            status=200 if component["status"] == "healthy" else 503
        )

    async def stats(self, request: web_request.Request) -> Response:
        """Event counters and per-stream reconnect statistics."""
        return web.json_response({**self.service.get_stats(), "timestamp": _now()})


def create_app(service) -> web.Application:
    app = web.Application()
    handler = HealthCheckHandler(service)
    app.router.add_get('/health', handler.health)
    app.router.add_get('/ready', handler.ready)
    app.router.add_get('/live', handler.live)
    app.router.add_get('/health/{feed}', handler.feed_health)
    app.router.add_get('/stats', handler.stats)
    return app


class HealthCheckServer:
    """HTTP server for health check endpoints."""

    def __init__(self, service, host: str = "0.0.0.0", port: int = 8080):
        self.service = service
        self.host = host
        self.port = port
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

    async def start(self):
        logger.info(f"Starting health check server on {self.host}:{self.port}")

        self.runner = web.AppRunner(create_app(self.service))
        await self.runner.setup()

        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()

        logger.info(f"Health check server started on http://{self.host}:{self.port}")

    async def stop(self):
        logger.info("Stopping health check server")

        if self.site:
            await self.site.stop()

        if self.runner:
            await self.runner.cleanup()

        logger.info("Health check server stopped")
