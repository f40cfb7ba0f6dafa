"""
Valuation Engine Process
Runs the valuation service on its scheduler until interrupted
"""

import asyncio
import signal

from navengine.config import settings
from navengine.core.logging import get_logger, setup_logging
from navengine.infrastructure.cache.redis_cache import RedisCache
from navengine.realtime.subscriber_registry import TOPIC_SNAPSHOT
from navengine.services.service_factory import build_store, build_valuation_service

logger = get_logger(__name__)


def _log_snapshot(snapshot) -> None:
    if snapshot.is_fallback:
        logger.warning("⚠️ Real positions unavailable; serving fallback data")
    logger.info(
        "📈 NAV %s (%+.2f%%) | %s positions | %s",
        snapshot.display_value,
        snapshot.change_percentage,
        snapshot.position_count,
        snapshot.provenance.value,
    )


async def run() -> None:
    setup_logging(settings.LOG_LEVEL)

    # ===================
    # STARTUP
    # ===================
    logger.info("=" * 60)
    logger.info("🚀 Starting NAV valuation engine")
    logger.info("=" * 60)

    logger.info("🏗️  Step 1/3: Building services (store=%s, mode=%s)...", settings.STORE_BACKEND, settings.DATA_MODE)
    store = build_store(settings)
    service = build_valuation_service(settings, store=store)
    service.subscribe(TOPIC_SNAPSHOT, _log_snapshot)

    logger.info("📊 Step 2/3: Loading positions...")
    await service.initialize()

    logger.info("📅 Step 3/3: Starting scheduler...")
    await service.start(
        tick_seconds=settings.SIMULATION_TICK_SECONDS,
        rate_seconds=settings.EXCHANGE_RATE_POLL_SECONDS,
        micro_seconds=settings.MICRO_TICK_SECONDS,
        timezone=settings.TIMEZONE,
    )
    logger.info("✅ Valuation engine running")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    try:
        await stop_event.wait()
    finally:
        # ===================
        # SHUTDOWN
        # ===================
        logger.info("🛑 Shutting down valuation engine...")
        await service.stop()
        if isinstance(store, RedisCache):
            await store.close()
        logger.info("👋 Shutdown complete")


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
