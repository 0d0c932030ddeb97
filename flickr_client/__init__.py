from .api import ApiError, FlickrApi, Request
from .client import FlickrClient
from .models import Changes, Identity, WatchedItem, WatchedSet
from .subscription import ChangeSubscription, EventType
