import asyncio
import logging
import signal
import sys
from typing import Optional
import uvicorn

from .api import ApiError
from .client import FlickrClient
from .config import Settings, settings
from .models import Changes
from .subscription import EventType
from . import server

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
# Silence noisy libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger("main")

class WatchService:
    def __init__(self, client: Optional[FlickrClient] = None, config: Settings = settings):
        self.config = config
        self.client = client or FlickrClient(config)
        # created by start() on the running loop
        self.stopped: Optional[asyncio.Event] = None
        self.client.subscription.add_event_listener(EventType.NO_CHANGE, self.on_no_change)

        # Link subscription to server module
        server.subscription = self.client.subscription

    def on_change(self, changes: Changes):
        logger.info(f"Changed sets: {changes.sets}, collections: {changes.collections}")

    def on_no_change(self):
        logger.debug("No Flickr changes found")

    async def setup(self):
        """Load the collection tree and configured sets so polling has a baseline."""
        await self.client.get_collections(allow_cache=False)

        for id in self.config.WATCH_SET_IDS:
            try:
                await self.client.get_set_info(id, allow_cache=False)
                await self.client.get_set_photos(id, allow_cache=False)
            except ApiError as e:
                logger.error(f"Cannot watch set {id}: {e}")

        logger.info(f"Watching {len(self.client.subscription.store.loaded_ids())} sets")

    def stop(self):
        if self.stopped is not None:
            self.stopped.set()

    async def start(self):
        self.stopped = asyncio.Event()
        await self.setup()
        self.client.subscribe(self.on_change, self.config.POLL_INTERVAL_MS)

        tasks = [asyncio.create_task(self.stopped.wait())]

        if self.config.HTTP_SERVER_ENABLED:
            config = uvicorn.Config(server.app, host="0.0.0.0", port=self.config.HTTP_SERVER_PORT, log_level="warning")
            server_task = uvicorn.Server(config).serve()
            tasks.append(asyncio.create_task(server_task))

        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            pass
        finally:
            await self.client.close()

def handle_sigterm(sig, frame):
    logger.info("Received SIGTERM, shutting down...")
    sys.exit(0)

def run():
    signal.signal(signal.SIGTERM, handle_sigterm)
    try:
        asyncio.run(WatchService().start())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")

if __name__ == "__main__":
    run()
