import json
import httpx
from flickr_client.api import FlickrApi
from flickr_client.cache import ResponseCache
from flickr_client.config import Settings

def make_settings(**overrides) -> Settings:
    values = dict(
        FLICKR_API_KEY="key",
        FLICKR_SECRET="secret",
        FLICKR_ACCESS_TOKEN="access",
        FLICKR_TOKEN_SECRET="token-secret",
        FLICKR_USER_ID="60950751@N04",
        MAX_RETRIES=1,
        RETRY_DELAY_MS=1,
    )
    values.update(overrides)
    return Settings(**values)

class FakeFlickr:
    """
    Stand-in for the Flickr REST endpoint. Responses are keyed by API method
    (without the `flickr.` prefix) and may be a dict, a raw string or a
    callable taking the request.
    """
    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.url.params.get("method", "").replace("flickr.", "", 1)
        res = self.responses.get(method, {"stat": "fail", "code": 112, "message": f"Method \"{method}\" not found"})
        if callable(res):
            res = res(request)
        if isinstance(res, httpx.Response):
            return res
        body = res if isinstance(res, str) else json.dumps(res)
        return httpx.Response(200, text=body)

    def calls(self, method: str):
        return [r for r in self.requests if r.url.params.get("method") == "flickr." + method]

def make_api(config: Settings, fake: FakeFlickr, cache: ResponseCache = None) -> FlickrApi:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return FlickrApi(config, client=client, cache=cache)
