import logging
from collections import OrderedDict
from typing import Any, Optional

logger = logging.getLogger(__name__)

def make_key(method: str, id: str) -> str:
    return f"{method}:{id}"

class ResponseCache:
    """
    Selected API responses keyed to method and entity ID. Least recently used
    entries are evicted once capacity is reached.
    """
    def __init__(self, capacity: int = 200):
        self.capacity = capacity
        self._items: "OrderedDict[str, Any]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def add(self, method: str, id: str, value: Any):
        key = make_key(method, id)
        self._items[key] = value
        self._items.move_to_end(key)
        self._evict()

    async def get(self, method: str, id: str) -> Optional[Any]:
        """Async so a slower store can replace the in-memory one."""
        key = make_key(method, id)
        if key not in self._items:
            return None
        self._items.move_to_end(key)
        return self._items[key]

    def remove(self, method: str, id: str):
        self._items.pop(make_key(method, id), None)

    def clear(self):
        self._items.clear()

    def set_capacity(self, count: int):
        self.capacity = count
        self._evict()

    def _evict(self):
        while len(self._items) > max(self.capacity, 0):
            key, _ = self._items.popitem(last=False)
            logger.debug(f"Evicted {key} from response cache")
