import asyncio
import logging
import time
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from .config import Settings, settings
from .constants import DEFAULT_POLL_INTERVAL, MIN_POLL_INTERVAL, Extra
from .engine import add_unique, has_changed, list_difference, map_set_collections, map_set_photos
from .models import Changes, WatchedSet
from .state import WatchStore

logger = logging.getLogger(__name__)

class EventType(Enum):
    # A set or collection has changed
    CHANGE = "change"
    # Polling found no change
    NO_CHANGE = "no_change"
    # A subscriber was added
    NEW_WATCHER = "new_watcher"

def duration_string(ms: int) -> str:
    seconds = ms / 1000.0
    if seconds < 60:
        return f"{seconds:g}s"
    if seconds < 3600:
        return f"{seconds / 60:g}m"
    return f"{seconds / 3600:g}h"

class ChangeSubscription:
    """
    Poll the Flickr API to find when sets or collections change.

    Collections are considered changed when a set is added to or removed from
    them, directly or through a child collection.

    Sets are considered changed when any one of:
    - last update time increases
    - photo is added or removed
    - photo update time increases

    Flickr does not roll up change times. An updated photo does not make its
    set show as updated, nor does an updated set make its collection show
    updated, hence the separate comparisons.
    """
    def __init__(self, client: Any, config: Settings = settings):
        self.client = client
        self.config = config
        self.store = WatchStore()
        # Changes accumulated but not yet emitted
        self.changes = Changes()
        # Milliseconds between change queries
        self.poll_interval = DEFAULT_POLL_INTERVAL
        # Whether there are any change subscribers
        self.active = False
        self.change_timer: Optional[asyncio.TimerHandle] = None
        self.poll_task: Optional[asyncio.Task] = None
        self.last_poll: float = 0.0
        self.listeners: Dict[EventType, List[Callable]] = defaultdict(list)

    @property
    def watched(self) -> Dict[str, WatchedSet]:
        return self.store.watched

    def add_event_listener(self, event: EventType, fn: Callable):
        self.listeners[event].append(fn)

    def _emit(self, event: EventType, *args):
        for fn in list(self.listeners[event]):
            try:
                fn(*args)
            except Exception as e:
                logger.error(f"Listener for {event.value} failed: {e}", exc_info=True)

    def add(self, fn: Optional[Callable[[Changes], None]], poll_interval: int = DEFAULT_POLL_INTERVAL):
        """
        Add subscriber to receive change notifications and start polling.

        :param poll_interval: Milliseconds between queries for change
        """
        if poll_interval < MIN_POLL_INTERVAL:
            # disallow rapid polling
            logger.warning(
                f"Poll interval of {duration_string(poll_interval)} is invalid; "
                f"reverting to {duration_string(DEFAULT_POLL_INTERVAL)}."
            )
            poll_interval = DEFAULT_POLL_INTERVAL

        self.poll_interval = poll_interval
        self.active = True
        if fn is not None:
            self.add_event_listener(EventType.CHANGE, fn)
        self._emit(EventType.NEW_WATCHER)
        self._schedule()

    def stop(self):
        """Stop polling. Subscribers stay registered."""
        self.active = False
        self._cancel_timer()
        if self.poll_task is not None and not self.poll_task.done():
            self.poll_task.cancel()

    def update_collections(self, *collections: Dict[str, Any]):
        """
        Record collection IDs whose member sets differ from the previous
        update, along with loaded sets whose collections changed.
        """
        # Collection IDs that differ between versions
        collection_diff: List[str] = []
        changed_sets: List[str] = []
        sets = map_set_collections(collections)
        # Only compare once collection sets have been seen
        compare = len(self.store) > 0

        for id, collection_ids in sets.items():
            watched = self.store.watched_set(id)

            if compare:
                diff = list_difference(collection_ids, watched.collections)
                if diff:
                    add_unique(collection_diff, *diff)
                    if watched.last_update > 0:
                        # sets without an update time haven't been retrieved
                        changed_sets.append(id)

            watched.collections = collection_ids

        if compare:
            # sets that were in a collection but now are in none
            for id, watched in self.store.watched.items():
                if id not in sets and watched.collections:
                    # reported even when never loaded, unlike a move between collections
                    changed_sets.append(id)
                    add_unique(collection_diff, *watched.collections)
                    watched.collections = []

        if collection_diff:
            self.changes.collections.extend(collection_diff)
            self.changes.sets.extend(changed_sets)

    def record_set_timestamp(self, id: str, last_update: int):
        watched = self.store.watched_set(id)
        changed = self.active and watched.last_update != 0 and last_update > watched.last_update
        watched.last_update = last_update

        if changed:
            self._record_set_change(id, watched)

    def record_set_photos(self, id: str, photos: Dict[str, Any]):
        """
        Replace the watched photos of a set. The response must include photo
        update times (the `last_update` extra) for changes to be seen.
        """
        watched = self.store.watched_set(id)
        latest = map_set_photos(photos.get("photo") or [])
        changed = self.active and len(watched.photos) > 0 and has_changed(watched.photos, latest)
        watched.photos = latest

        if changed:
            self._record_set_change(id, watched)

    def _record_set_change(self, id: str, watched: WatchedSet):
        # emitted together on the next poll
        self.changes.sets.append(id)
        self.changes.collections.extend(watched.collections)

    async def query_change(self):
        """Query for changes to photos, sets or collections."""
        self._cancel_timer()

        set_ids = self.store.loaded_ids()
        fetches = [self.client.get_set_info(id, allow_cache=False) for id in set_ids]
        fetches += [
            self.client.get_set_photos(id, [Extra.DATE_UPDATED], allow_cache=False)
            for id in set_ids
        ]
        fetches.append(self.client.get_collections(allow_cache=False))

        if self.config.ISOLATE_POLL_FAILURES:
            results = await asyncio.gather(*fetches, return_exceptions=True)
            for r in results:
                if isinstance(r, Exception):
                    logger.error(f"Change query failed: {r}")
        else:
            await asyncio.gather(*fetches)

        self.last_poll = time.time()
        self.emit_change()

        if self.active:
            self._schedule()

    def emit_change(self):
        """Emit accumulated changes and reset them."""
        if self.changes.is_empty():
            self._emit(EventType.NO_CHANGE)
            return

        changes = Changes(
            sets=add_unique([], *self.changes.sets),
            collections=add_unique([], *self.changes.collections)
        )
        self._emit(EventType.CHANGE, changes)
        logger.info(
            f"Flickr sets [{','.join(changes.sets)}] or collections "
            f"[{','.join(changes.collections)}] changed"
        )
        self.changes = Changes()

    def _schedule(self):
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self.change_timer = loop.call_later(self.poll_interval / 1000.0, self._on_timer)

    def _cancel_timer(self):
        if self.change_timer is not None:
            self.change_timer.cancel()
            self.change_timer = None

    def _on_timer(self):
        self.change_timer = None
        self.poll_task = asyncio.ensure_future(self.query_change())
        self.poll_task.add_done_callback(self._on_poll_done)

    def _on_poll_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        e = task.exception()
        if e is not None:
            # a failed cycle doesn't reschedule
            logger.error(f"Change query aborted, polling halted: {e}", exc_info=e)
