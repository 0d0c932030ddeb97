import logging
from typing import Dict, Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)

class RetryDecision(BaseModel):
    retry: bool
    delay_ms: int = 0
    attempt: int = 0

ABANDON = RetryDecision(retry=False)

class RetryTracker:
    """
    Counts consecutive retryable failures per operation key, where a key is
    the API method and entity ID.
    """
    def __init__(self, max_retries: int, delay_ms: int):
        self.max_retries = max_retries
        self.delay_ms = delay_ms
        self.counts: Dict[str, int] = {}

    def record_failure(self, key: str) -> RetryDecision:
        count = self.counts.get(key, 0) + 1

        if count > self.max_retries:
            self.counts[key] = 0
            logger.error(f"Call to {key} failed after {self.max_retries} retries")
            return ABANDON

        self.counts[key] = count
        logger.warning(f"Retry {count} for {key}")
        return RetryDecision(retry=True, delay_ms=self.delay_ms, attempt=count)

    def record_success(self, key: str):
        if self.counts.get(key, 0) > 0:
            logger.info(f"Call to {key} succeeded")
            self.counts[key] = 0

    def count(self, key: str) -> Optional[int]:
        return self.counts.get(key)
