"""CLOB Stream Service - logs live order book events with auto-reconnect."""

import argparse
import asyncio
import logging
import os
import signal
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .clients.market_ws import MarketWsClient
from .clients.user_ws import UserWsClient
from .config.settings import load_settings
from .errors import ClobStreamError
from .health import HealthCheckServer
from .models import ApiCreds, BookEvent, OrderEvent, PriceChangeEvent, TradeEvent
from .stream import ReconnectingStream, StreamState
from .utils.logging import log_stream_error, setup_logging

logger = logging.getLogger(__name__)


class MarketStreamService:
    """Consumes the market feed (and the user feed when credentials are set)."""

    def __init__(self, config_file: Optional[str] = "config/local.yaml", asset_ids: Optional[List[str]] = None):
        self.config = load_settings(config_file)
        if asset_ids:
            self.config.market.asset_ids = list(asset_ids)

        self.streams: Dict[str, ReconnectingStream] = {}
        self.health_server: Optional[HealthCheckServer] = None
        self.event_count = 0
        self._shutdown_event = asyncio.Event()

        setup_logging(self.config.logging, self.config.service_name)
        logger.info("CLOB Stream Service initialized")

    def build_streams(self) -> Dict[str, ReconnectingStream]:
        """Create one reconnecting stream per configured feed."""
        asset_ids = list(self.config.market.asset_ids)
        if not asset_ids:
            raise ValueError("No asset ids configured (market.asset_ids)")

        market_client = MarketWsClient.from_config(self.config.market)
        streams = {
            "market": ReconnectingStream(
                self.config.reconnect,
                lambda: market_client.subscribe(asset_ids),
            )
        }

        user_config = self.config.user
        if user_config.has_credentials:
            creds = ApiCreds(
                api_key=user_config.api_key,
                secret=user_config.api_secret,
                passphrase=user_config.api_passphrase,
            )
            user_client = UserWsClient.from_config(user_config)
            markets = list(user_config.markets)
            streams["user"] = ReconnectingStream(
                self.config.reconnect,
                lambda: user_client.subscribe(creds, markets),
            )

        return streams

    async def start(self):
        """Start streaming until a signal arrives or every stream gives up."""
        logger.info(f"Starting CLOB Stream Service for {len(self.config.market.asset_ids)} asset(s)")

        self.streams = self.build_streams()
        self._setup_signal_handlers()

        if self.config.health.enabled:
            self.health_server = HealthCheckServer(self, self.config.health.host, self.config.health.port)
            await self.health_server.start()

        tasks = [
            asyncio.create_task(self._consume(name, stream), name=f"consume-{name}")
            for name, stream in self.streams.items()
        ]
        watcher = asyncio.create_task(self._stop_when_all_done(tasks))

        await self._shutdown_event.wait()

        logger.info("Shutting down CLOB Stream Service")
        watcher.cancel()
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for stream in self.streams.values():
            await stream.aclose()
        if self.health_server:
            await self.health_server.stop()

        for result in results:
            if isinstance(result, Exception):
                raise result

        logger.info(f"CLOB Stream Service stopped after {self.event_count} events")

    async def _stop_when_all_done(self, tasks):
        await asyncio.wait(tasks)
        self._shutdown_event.set()

    async def _consume(self, name: str, stream: ReconnectingStream):
        async for item in stream:
            if isinstance(item, ClobStreamError):
                log_stream_error(logger, name, item)
                continue

            self.event_count += 1
            self.log_event(item)

        logger.warning(f"[{name}] stream ended permanently")

    def log_event(self, event):
        """Log a one-line summary of a decoded event."""
        if isinstance(event, BookEvent):
            best_bid = event.best_bid
            best_ask = event.best_ask
            logger.info(
                f"[Book #{self.event_count}] market={event.market} asset={event.asset_id} "
                f"bids={len(event.bids)} asks={len(event.asks)} "
                f"best_bid={f'{best_bid.size}@{best_bid.price}' if best_bid else '-'} "
                f"best_ask={f'{best_ask.size}@{best_ask.price}' if best_ask else '-'}"
            )
        elif isinstance(event, PriceChangeEvent):
            logger.info(f"[Price Change #{self.event_count}] market={event.market} changes={len(event.price_changes)}")
            for change in event.price_changes:
                logger.info(
                    f"    {change.side.value} @ {change.price}: {change.size} "
                    f"({'removed' if change.is_removal else 'updated'})"
                )
        elif isinstance(event, TradeEvent):
            logger.info(
                f"[Trade #{self.event_count}] {event.side.value} {event.size} @ {event.price} "
                f"market={event.market} status={event.status}"
            )
        elif isinstance(event, OrderEvent):
            logger.info(
                f"[Order #{self.event_count}] {event.order_type} {event.side.value} @ {event.price} "
                f"matched={event.size_matched}/{event.original_size}"
            )

    def _setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, initiating shutdown")
            self._shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def get_stats(self) -> dict:
        return {
            "events": self.event_count,
            "streams": {name: stream.get_stats() for name, stream in self.streams.items()},
        }

    async def health_check(self) -> dict:
        """
        Report service health.

        A stream that is streaming is healthy, one that is reconnecting is
        degraded, and one that gave up (or was never started) is unhealthy.
        """
        health_status = {
            "service": self.config.service_name,
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "components": {}
        }

        if not self.streams:
            health_status["status"] = "unhealthy"
            return health_status

        for name, stream in self.streams.items():
            if stream.state is StreamState.STREAMING:
                status = "healthy"
            elif stream.state is StreamState.EXHAUSTED:
                status = "unhealthy"
            else:
                status = "degraded"
            health_status["components"][name] = {"status": status, **stream.get_stats()}

        component_statuses = [comp["status"] for comp in health_status["components"].values()]
        if any(status == "unhealthy" for status in component_statuses):
            health_status["status"] = "unhealthy"
        elif any(status == "degraded" for status in component_statuses):
            health_status["status"] = "degraded"

        return health_status


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="clob-stream", description="Stream CLOB order book events")
    parser.add_argument(
        "--config", default=os.getenv("CONFIG_FILE", "config/local.yaml"),
        help="YAML config file (default: $CONFIG_FILE or config/local.yaml)",
    )
    parser.add_argument(
        "--asset-id", dest="asset_ids", action="append",
        help="Asset id to subscribe to; repeat for several. Overrides the config file.",
    )
    return parser.parse_args(argv)


async def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    try:
        service = MarketStreamService(args.config, asset_ids=args.asset_ids)
        await service.start()
    except Exception as e:
        logger.error(f"Service failed: {e}", exc_info=True)
        sys.exit(1)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
