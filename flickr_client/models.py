from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

class Identity(BaseModel):
    """Remote entity an API call is made for, e.g. a user or photo set."""
    type: str
    value: str

class Token(BaseModel):
    access: str
    secret: str

class WatchedItem(BaseModel):
    # 0 means the item is known but hasn't been fetched directly, such as a
    # set listed in a collection tree
    last_update: int = 0

WatchMap = Dict[str, WatchedItem]

class WatchedSet(WatchedItem):
    collections: List[str] = Field(default_factory=list)  # Ancestor collection IDs
    photos: WatchMap = Field(default_factory=dict)

class Changes(BaseModel):
    """Set and collection IDs changed since the last emitted event."""
    sets: List[str] = Field(default_factory=list)
    collections: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.sets and not self.collections

class ClassifiedResponse(BaseModel):
    ok: bool
    payload: Optional[Dict[str, Any]] = None
    retryable: bool = False
    message: str = ""

    @classmethod
    def success(cls, payload: Dict[str, Any]) -> "ClassifiedResponse":
        return cls(ok=True, payload=payload)

    @classmethod
    def failure(cls, message: str, retryable: bool = True) -> "ClassifiedResponse":
        return cls(ok=False, retryable=retryable, message=message)
