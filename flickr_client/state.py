import logging
from typing import Dict, List
from .models import WatchedSet

logger = logging.getLogger(__name__)

class WatchStore:
    """Sets currently being watched for change, keyed by set ID."""
    def __init__(self):
        self.watched: Dict[str, WatchedSet] = {}

    def __len__(self) -> int:
        return len(self.watched)

    def __contains__(self, id: str) -> bool:
        return id in self.watched

    def watched_set(self, id: str) -> WatchedSet:
        """Get the set watcher, creating it if needed."""
        if id not in self.watched:
            logger.debug(f"Watching set {id}")
            self.watched[id] = WatchedSet()
        return self.watched[id]

    def loaded_ids(self) -> List[str]:
        """
        IDs of sets with an update time. The others are placeholders seen in
        the collection tree but never fetched.
        """
        return [id for id, s in self.watched.items() if s.last_update > 0]
