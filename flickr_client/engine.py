from typing import Any, Dict, Iterable, List, Optional
from .models import WatchedItem, WatchMap

# Set ID mapped to the IDs of every collection containing it, directly or
# ancestrally
SetCollections = Dict[str, List[str]]

def add_unique(target: List[str], *values: str) -> List[str]:
    for v in values:
        if v not in target:
            target.append(v)
    return target

def list_difference(a: Iterable[str], b: Iterable[str]) -> List[str]:
    """IDs in only one of the two lists, ignoring order."""
    a, b = list(a), list(b)
    return [x for x in a if x not in b] + [x for x in b if x not in a]

def map_leaf_timestamps(items: Iterable[Dict[str, Any]]) -> WatchMap:
    """
    Map photo ID to its last update time. Flickr only includes `lastupdate`
    when the `last_update` extra is requested.
    """
    return {
        str(p["id"]): WatchedItem(last_update=int(p.get("lastupdate") or 0))
        for p in items
    }

map_set_photos = map_leaf_timestamps

def has_changed(older: WatchMap, newer: WatchMap) -> bool:
    """
    Whether a map of watched items has changed. It has if the item count
    differs, an item is missing or an item has a newer update time. An older
    time of 0 is never stale.
    """
    if len(older) != len(newer):
        return True

    for key, item in older.items():
        if key not in newer:
            return True
        if item.last_update != 0 and item.last_update < newer[key].last_update:
            return True

    return False

def map_set_collections(
    collections: Iterable[Dict[str, Any]],
    sets: Optional[SetCollections] = None,
    *parent_ids: str
) -> SetCollections:
    """
    Walk a collection tree and list, for each set, every collection it
    belongs to. The immediate parent comes first, then its ancestors. A set
    found under several branches gets the union of their collections.
    """
    result: SetCollections = {k: list(v) for k, v in (sets or {}).items()}

    for c in collections:
        for s in c.get("set") or []:
            add_unique(result.setdefault(s["id"], []), c["id"], *parent_ids)

        children = c.get("collection") or []
        if children:
            result = map_set_collections(children, result, c["id"], *parent_ids)

    return result
