# doc/examples/example_live_updates.py

import asyncio
import logging
from typing import List

from tw_nhi_icc import TWNHIICCService, CardRecord, NetworkError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
)
logger = logging.getLogger("LiveUpdatesExample")

# --- Configuration ---
URL_PREFIX = "http://127.0.0.1:12345"
PUSH_INTERVAL = 2 # Seconds between card list pushes
RUN_SECONDS = 60
MAX_RETRIES = 10


async def on_update(cards: List[CardRecord]):
    """Called every time the service pushes the card list."""
    names = ", ".join(f"{card.full_name} @ {card.reader_name}" for card in cards) or "none"
    logger.info(f"Inserted cards: {names}")


async def main():
    retries = 0

    def on_retry() -> bool:
        """Gives up after MAX_RETRIES reconnect attempts."""
        nonlocal retries
        retries += 1
        logger.warning(f"Reconnect attempt {retries}/{MAX_RETRIES}")
        return retries <= MAX_RETRIES

    async with TWNHIICCService(URL_PREFIX) as service:
        service.on_websocket_update = on_update
        service.on_websocket_retry = on_retry

        try:
            await service.open_websocket(PUSH_INTERVAL)
        except NetworkError as e:
            logger.error(f"Cannot open the WebSocket: {e}")
            return

        logger.info(f"Listening for {RUN_SECONDS}s...")
        await asyncio.sleep(RUN_SECONDS / 2)

        # Slow down the pushes for the second half
        if await service.set_websocket_interval(PUSH_INTERVAL * 2):
            logger.info(f"Push interval changed to {PUSH_INTERVAL * 2}s")
        await asyncio.sleep(RUN_SECONDS / 2)

    logger.info("WebSocket closed.")


if __name__ == "__main__":
    asyncio.run(main())
