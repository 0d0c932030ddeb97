import asyncio
import logging
import httpx
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import quote
from . import oauth
from .cache import ResponseCache, make_key
from .config import Settings, settings
from .constants import BASE_PATH, METHOD_PREFIX
from .models import Identity, Token
from .response import parse
from .retry import RetryTracker

logger = logging.getLogger(__name__)

USER_AGENT = "flickr-client (python)"

Fetch = Callable[[], Awaitable[str]]

class ApiError(Exception):
    """Terminal failure of a Flickr API call."""

@dataclass
class Request:
    # Retrieve the wanted value from the full response; None means the
    # response didn't have the expected shape
    select: Callable[[Dict[str, Any]], Any] = lambda r: r
    sign: bool = False
    # Whether the result may be cached, subject to USE_CACHE
    allow_cache: bool = False
    params: Dict[str, Any] = field(default_factory=dict)

def encode_value(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    # Same reserved set as encodeURIComponent
    return quote(str(value), safe="-_.!~*'()")

class FlickrApi:
    def __init__(
        self,
        config: Settings = settings,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[ResponseCache] = None
    ):
        self.config = config
        self.client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=config.REQUEST_TIMEOUT_SECONDS
        )
        self.cache = cache if cache is not None else ResponseCache(config.MAX_CACHE_SIZE)
        self.retries = RetryTracker(config.MAX_RETRIES, config.RETRY_DELAY_MS)

    @property
    def token(self) -> Optional[Token]:
        if not self.config.FLICKR_ACCESS_TOKEN:
            return None
        return Token(access=self.config.FLICKR_ACCESS_TOKEN, secret=self.config.FLICKR_TOKEN_SECRET or "")

    def parameterize(
        self,
        method: str,
        identity: Optional[Identity] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Build the query string. Parameter order is caller params, standard
        params, then the identity, so the same call always yields the same URL.
        """
        args = dict(params or {})
        args["api_key"] = self.config.FLICKR_API_KEY
        args["format"] = "json"
        args["nojsoncallback"] = 1
        args["method"] = METHOD_PREFIX + method

        if identity is not None:
            args[identity.type] = identity.value

        return "?" + "&".join(f"{k}={encode_value(v)}" for k, v in args.items())

    def method_url(self, method: str, identity: Optional[Identity], params: Optional[Dict[str, Any]] = None) -> str:
        return f"https://{self.config.FLICKR_HOST}{BASE_PATH}{self.parameterize(method, identity, params)}"

    def basic_request(self, url: str) -> Fetch:
        async def attempt() -> str:
            resp = await self.client.get(url)
            return resp.text
        return attempt

    def signed_request(self, url: str, token: Optional[Token]) -> Fetch:
        async def attempt() -> str:
            signed = oauth.sign_url(
                url,
                self.config.FLICKR_API_KEY,
                self.config.FLICKR_SECRET,
                token.access if token else None,
                token.secret if token else None
            )
            resp = await self.client.get(signed)
            return resp.text
        return attempt

    def _use_cache(self, request: Request) -> bool:
        return request.allow_cache and self.config.USE_CACHE

    async def call(self, method: str, identity: Optional[Identity], request: Request) -> Any:
        """Load response from cache or call the API."""
        if self._use_cache(request):
            id_value = identity.value if identity else ""
            try:
                item = await self.cache.get(method, id_value)
                if item is not None:
                    return item
            except Exception as e:
                logger.error(f"Cache read failed for {make_key(method, id_value)}: {e}", exc_info=True)

        return await self.call_api(method, identity, request)

    async def call_api(self, method: str, identity: Optional[Identity], request: Request) -> Any:
        """
        Invoke the remote API, retrying transient failures.

        Raises ApiError when the item is not found, the response lacks the
        selected field or retries are exhausted.
        """
        id_type = identity.type if identity else ""
        id_value = identity.value if identity else ""
        key = make_key(method, id_value)
        url = self.method_url(method, identity, request.params)
        failed = f"Flickr {method} failed for {id_type} {id_value}"

        attempt = self.signed_request(url, self.token) if request.sign else self.basic_request(url)

        while True:
            try:
                body = await attempt()
            except httpx.HTTPError as e:
                logger.error(f"Request for {key} failed: {e}")
            else:
                res = parse(body, key)
                if res.ok:
                    self.retries.record_success(key)
                    try:
                        value = request.select(res.payload)
                    except (KeyError, TypeError, AttributeError):
                        value = None
                    if value is None:
                        logger.error(f"Response for {key} did not contain expected field")
                        raise ApiError(f"{failed}: response shape did not contain expected field")
                    if self._use_cache(request):
                        self.cache.add(method, id_value, value)
                    return value
                if not res.retryable:
                    raise ApiError(failed)

            decision = self.retries.record_failure(key)
            if not decision.retry:
                raise ApiError(failed)
            await asyncio.sleep(decision.delay_ms / 1000.0)

    async def fetch_token(
        self,
        url: str,
        token: Optional[str] = None,
        token_secret: Optional[str] = None,
        callback: Optional[str] = None,
        verifier: Optional[str] = None
    ) -> Dict[str, str]:
        """Signed call to one of the OAuth token endpoints."""
        signed = oauth.sign_url(
            url,
            self.config.FLICKR_API_KEY,
            self.config.FLICKR_SECRET,
            token,
            token_secret,
            callback=callback,
            verifier=verifier
        )
        resp = await self.client.get(signed)
        resp.raise_for_status()
        return oauth.parse_token_response(resp.text)

    async def close(self):
        await self.client.aclose()
