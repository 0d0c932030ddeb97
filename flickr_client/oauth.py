"""
OAuth 1.0a request signing for Flickr.

Flickr accepts the OAuth parameters in the query string, so requests are
signed into the URL rather than an Authorization header.

See https://www.flickr.com/services/api/auth.oauth.html
"""
from typing import Dict, Optional
from oauthlib.common import urldecode
from oauthlib.oauth1 import Client, SIGNATURE_HMAC, SIGNATURE_TYPE_QUERY

def sign_url(
    url: str,
    consumer_key: str,
    consumer_secret: str,
    token: Optional[str] = None,
    token_secret: Optional[str] = None,
    callback: Optional[str] = None,
    verifier: Optional[str] = None,
    nonce: Optional[str] = None,
    timestamp: Optional[int] = None
) -> str:
    """Return the URL with OAuth parameters and signature added to its query."""
    client = Client(
        consumer_key,
        client_secret=consumer_secret,
        resource_owner_key=token,
        resource_owner_secret=token_secret,
        callback_uri=callback,
        verifier=verifier,
        signature_method=SIGNATURE_HMAC,
        signature_type=SIGNATURE_TYPE_QUERY,
        nonce=nonce,
        timestamp=str(timestamp) if timestamp is not None else None
    )
    signed, _, _ = client.sign(url, http_method="GET")
    return signed

def parse_token_response(body: str) -> Dict[str, str]:
    """Token endpoints answer with a form-encoded body."""
    return dict(urldecode(body.strip()))
