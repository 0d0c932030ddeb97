from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Flickr auth
    FLICKR_API_KEY: str = ""
    FLICKR_SECRET: str = ""
    FLICKR_CALLBACK: Optional[str] = None
    FLICKR_ACCESS_TOKEN: Optional[str] = None
    FLICKR_TOKEN_SECRET: Optional[str] = None
    FLICKR_USER_ID: Optional[str] = None
    FLICKR_HOST: str = "api.flickr.com"

    # Cache
    USE_CACHE: bool = False
    MAX_CACHE_SIZE: int = 200

    # Photo sizes returned with set photos and searches
    SET_PHOTO_SIZES: List[str] = ["url_l"]
    SEARCH_PHOTO_SIZES: List[str] = ["url_l"]

    # Retry
    MAX_RETRIES: int = 3
    RETRY_DELAY_MS: int = 500

    # Change polling
    POLL_INTERVAL_MS: int = 300000  # 5m
    ISOLATE_POLL_FAILURES: bool = False
    WATCH_SET_IDS: List[str] = []

    # System
    LOG_LEVEL: str = "INFO"
    REQUEST_TIMEOUT_SECONDS: int = 30
    HTTP_SERVER_ENABLED: bool = False
    HTTP_SERVER_PORT: int = 8080
    HTTP_SERVER_TOKEN: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
