import logging
from typing import Any, Callable, Dict, List, Optional, Union
from .api import ApiError, FlickrApi, Request
from .config import Settings, settings
from .constants import ACCESS_TOKEN_URL, AUTHORIZE_URL, REQUEST_TOKEN_URL, Extra, Method, Sort, TypeName
from .models import Changes, Identity, Token
from .subscription import ChangeSubscription, EventType

logger = logging.getLogger(__name__)

class FlickrClient:
    def __init__(self, config: Settings = settings, api: Optional[FlickrApi] = None):
        self.config = config
        self.api = api or FlickrApi(config)
        self.api.cache.set_capacity(config.MAX_CACHE_SIZE)
        self.subscription = ChangeSubscription(self, config)
        self._request_secret: Optional[str] = None
        self._evicting = False

        if config.USE_CACHE:
            # clear cached responses once something is watching for change
            self.subscription.add_event_listener(EventType.NEW_WATCHER, self._on_new_watcher)

    @property
    def user_id(self) -> Identity:
        return Identity(type=TypeName.USER, value=self.config.FLICKR_USER_ID or "")

    def set_id(self, id: str) -> Identity:
        return Identity(type=TypeName.SET, value=id)

    def photo_id(self, id: Union[str, int]) -> Identity:
        return Identity(type=TypeName.PHOTO, value=str(id))

    def _on_new_watcher(self):
        if not self._evicting:
            self._evicting = True
            self.subscription.add_event_listener(EventType.CHANGE, self._on_change)

    def _on_change(self, changes: Changes):
        """Remove cached responses for sets and collections that changed."""
        if not self.config.USE_CACHE:
            return

        if changes.collections:
            self.api.cache.remove(Method.COLLECTIONS, self.user_id.value)

        for id in changes.sets:
            self.api.cache.remove(Method.Set.INFO, id)
            self.api.cache.remove(Method.Set.PHOTOS, id)

    def subscribe(self, fn: Callable[[Changes], None], poll_interval: Optional[int] = None):
        """
        Receive change notifications. This also starts polling for change.
        """
        self.subscription.add(fn, poll_interval or self.config.POLL_INTERVAL_MS)

    async def get_collections(self, allow_cache: bool = True) -> List[Dict[str, Any]]:
        """
        See https://www.flickr.com/services/api/flickr.collections.getTree.html
        """
        collections = await self.api.call(
            Method.COLLECTIONS,
            self.user_id,
            Request(
                select=lambda r: r["collections"].get("collection", []) if "collections" in r else None,
                allow_cache=allow_cache
            )
        )
        self.subscription.update_collections(*collections)
        return collections

    async def get_set_info(self, id: str, allow_cache: bool = True) -> Dict[str, Any]:
        """
        See https://www.flickr.com/services/api/flickr.photosets.getInfo.html
        """
        info = await self.api.call(
            Method.Set.INFO,
            self.set_id(id),
            Request(select=lambda r: r.get("photoset"), allow_cache=allow_cache)
        )
        self.subscription.record_set_timestamp(info.get("id", id), int(info.get("date_update") or 0))
        return info

    async def get_set_photos(
        self,
        id: str,
        extras: Optional[List[str]] = None,
        allow_cache: bool = True
    ) -> Dict[str, Any]:
        """
        All photos in a set. The update time must be among the extras for
        change detection to work.

        See https://www.flickr.com/services/api/flickr.photosets.getPhotos.html
        """
        if extras:
            extras_list = ",".join(extras)
        else:
            extras_list = ",".join([
                Extra.DESCRIPTION,
                Extra.TAGS,
                Extra.DATE_TAKEN,
                Extra.DATE_UPDATED,
                Extra.LOCATION,
                Extra.PATH_ALIAS,
            ] + self.config.SET_PHOTO_SIZES)

        photos = await self.api.call(
            Method.Set.PHOTOS,
            self.set_id(id),
            Request(
                params={"extras": extras_list},
                select=lambda r: r.get("photoset"),
                allow_cache=allow_cache
            )
        )
        self.subscription.record_set_photos(id, photos)
        return photos

    async def get_photo_info(self, id: str) -> Dict[str, Any]:
        return await self.api.call(
            Method.Photo.INFO,
            self.photo_id(id),
            Request(select=lambda r: r.get("photo"), allow_cache=True)
        )

    async def get_photo_sizes(self, id: str) -> List[Dict[str, Any]]:
        return await self.api.call(
            Method.Photo.SIZES,
            self.photo_id(id),
            Request(select=lambda r: r["sizes"].get("size", []) if "sizes" in r else None)
        )

    async def get_photo_context(self, id: str) -> List[Dict[str, Any]]:
        """All sets a photo belongs to."""
        return await self.api.call(
            Method.Photo.SETS,
            self.photo_id(id),
            Request(select=lambda r: r.get("set", []))
        )

    async def get_exif(self, id: str) -> List[Dict[str, Any]]:
        def select(r: Dict[str, Any]) -> List[Dict[str, Any]]:
            photo = r.get("photo")
            if photo is None:
                return []
            # Flickr has used both field names
            return photo.get("exif") or photo.get("EXIF") or []

        return await self.api.call(
            Method.Photo.EXIF,
            self.photo_id(id),
            Request(select=select, allow_cache=True)
        )

    async def photo_search(self, tags: Union[str, List[str]]) -> List[Dict[str, Any]]:
        """
        Signed because results differ from unsigned calls, even for public
        photos.
        """
        return await self.api.call(
            Method.Photo.SEARCH,
            self.user_id,
            Request(
                params={
                    "extras": ",".join(self.config.SEARCH_PHOTO_SIZES),
                    "tags": tags if isinstance(tags, str) else ",".join(tags),
                    "sort": Sort.RELEVANCE,
                    "per_page": 500,  # maximum
                },
                select=lambda r: r["photos"].get("photo", []) if "photos" in r else None,
                sign=True
            )
        )

    async def get_all_photo_tags(self) -> List[Dict[str, Any]]:
        def select(r: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
            tags = (r.get("who") or {}).get("tags")
            if tags is None:
                return None
            return tags.get("tag", [])

        return await self.api.call(
            Method.Photo.TAGS,
            self.user_id,
            Request(
                select=select,
                sign=True,
                allow_cache=True
            )
        )

    async def get_request_token(self) -> str:
        """Start OAuth authorization, returning the URL the user must visit."""
        data = await self.api.fetch_token(REQUEST_TOKEN_URL, callback=self.config.FLICKR_CALLBACK or "oob")
        request_token = data.get("oauth_token")
        if not request_token:
            raise ApiError("Flickr request token response had no token")

        # the secret is needed to exchange the verified token
        self._request_secret = data.get("oauth_token_secret")
        return f"{AUTHORIZE_URL}?oauth_token={request_token}"

    async def get_access_token(self, request_token: str, verifier: str) -> Token:
        if self._request_secret is None:
            raise ApiError("Cannot get access token without secret")

        secret, self._request_secret = self._request_secret, None
        data = await self.api.fetch_token(ACCESS_TOKEN_URL, request_token, secret, verifier=verifier)
        if "oauth_token" not in data:
            raise ApiError("Flickr access token response had no token")
        return Token(access=data["oauth_token"], secret=data.get("oauth_token_secret", ""))

    def clear_cache(self):
        self.api.cache.clear()

    async def close(self):
        self.subscription.stop()
        await self.api.close()
