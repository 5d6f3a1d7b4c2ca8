import logging
from typing import Any, Optional

import httpx

from config.config import settings
from core.errors import FetchError, ParseError
from utils.http import get

logger = logging.getLogger(__name__)

class ResourceLoader:
    """
    Fetch one named static JSON resource and parse it.
    No caching here, that is the DatasetCache's job.
    """

    def __init__(self,
                 base_url: Optional[str] = None,
                 *,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 attempts: Optional[int] = None,
                 timeout: Optional[float] = None,
                 min_wait: Optional[float] = None,
                 max_wait: Optional[float] = None) -> None:
        self.base_url = httpx.URL(base_url or settings.DATA_BASE_URL)
        self.transport = transport
        self.attempts = attempts
        self.timeout = timeout
        self.min_wait = min_wait
        self.max_wait = max_wait

    def url_for(self, resource: str) -> httpx.URL:
        return self.base_url.join(resource)

    async def fetch(self, resource: str) -> Any:
        url = self.url_for(resource)
        try:
            r = await get(str(url),
                          attempts=self.attempts,
                          timeout=self.timeout,
                          min_wait=self.min_wait,
                          max_wait=self.max_wait,
                          transport=self.transport)
        except httpx.HTTPError as e:
            logger.warning(f"GET {url} failed: {e}")
            raise FetchError(resource, e) from e

        try:
            data = r.json()
        except ValueError as e:
            logger.warning(f"{resource} is not valid JSON: {e}")
            raise ParseError(resource, e) from e

        logger.debug(f"Fetched {resource} ({len(r.content)} bytes)")
        return data


async def fetch_resource(resource: str, base_url: Optional[str] = None) -> Any:
    """Fetch a single resource with a throwaway loader."""
    return await ResourceLoader(base_url).fetch(resource)

if __name__ == "__main__":
    import asyncio
    import sys

    logging.basicConfig(level=settings.LOG_LEVEL)
    x = asyncio.run(fetch_resource(sys.argv[1] if len(sys.argv) > 1 else settings.CORE_RESOURCE))
    print(x)
