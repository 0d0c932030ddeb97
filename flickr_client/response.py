import json
import logging
import re
from typing import Optional
from .constants import Status
from .models import ClassifiedResponse

logger = logging.getLogger(__name__)

HTML_MARKER = re.compile(r"^\s*(<!doctype html|<html)", re.IGNORECASE)

def parse(body: Optional[str], key: str) -> ClassifiedResponse:
    """
    Classify a raw Flickr response body as success, retryable failure or
    terminal failure.

    See http://www.flickr.com/services/api/response.json.html
    """
    if not body:
        logger.error(f"Call to {key} returned an empty body")
        return ClassifiedResponse.failure("Empty response")

    # Flickr escapes single quotes, which isn't valid JSON
    body = body.replace("\\'", "'")

    if HTML_MARKER.search(body):
        logger.error(f"Call to {key} returned HTML instead of JSON")
        return ClassifiedResponse.failure("HTML response")

    try:
        data = json.loads(body)
    except ValueError as e:
        logger.error(f"Call to {key} returned invalid JSON: {e}")
        return ClassifiedResponse.failure("Invalid JSON")

    if data is None:
        logger.error(f"Call to {key} returned null")
        return ClassifiedResponse.failure("Null response")

    if not isinstance(data, dict):
        logger.error(f"Call to {key} returned unexpected {type(data).__name__}")
        return ClassifiedResponse.failure("Unexpected response")

    if data.get("stat") == Status.FAILED:
        message = str(data.get("message", ""))
        logger.error(f"Call to {key} failed with code {data.get('code')}: {message}")
        # An item that doesn't exist won't appear on retry
        return ClassifiedResponse.failure(message, retryable="not found" not in message)

    return ClassifiedResponse.success(data)
