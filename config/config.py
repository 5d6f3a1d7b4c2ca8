from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List

class Settings(BaseSettings):
    # Static data location
    DATA_BASE_URL: str = "http://localhost:8000/"

    # Resource names (relative to DATA_BASE_URL)
    CORE_RESOURCE: str = "dog_core.json"
    PARK_PARTITIONS: List[str] = [
        "dog_parks_1.json",
        "dog_parks_2.json",
        "dog_parks_3.json",
    ]
    DOGRUNS_RESOURCE: str = "dog_runs.json"
    CLINICS_RESOURCE: str = "clinics_and_services.json"
    RESOURCES_RESOURCE: str = "resources_events_contacts.json"

    # Transport
    FETCH_TIMEOUT: float = 30.0
    # 1 means a single attempt, failures go straight back to the cache
    FETCH_ATTEMPTS: int = 1
    RETRY_MIN_WAIT: int = 1
    RETRY_MAX_WAIT: int = 10

    # Search behaviour
    SEARCH_DEBOUNCE_MS: int = 300
    SEARCH_RESULT_CAP: int = 200

    DEFAULT_TAB: str = "core"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

# create a global settings instance
settings = get_settings()
