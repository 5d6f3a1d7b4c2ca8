import httpx, logging
from typing import Optional
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from config.config import settings

logger = logging.getLogger(__name__)

async def get(url: str,
              *,
              attempts: Optional[int] = None,
              timeout: Optional[float] = None,
              min_wait: Optional[float] = None,
              max_wait: Optional[float] = None,
              transport: Optional[httpx.AsyncBaseTransport] = None,
              **params) -> httpx.Response:
    headers = {
        "User-Agent": "DogInfoPanel/1.0",
        "Accept": "application/json",
    }
    attempts = attempts or settings.FETCH_ATTEMPTS
    min_wait = settings.RETRY_MIN_WAIT if min_wait is None else min_wait
    max_wait = settings.RETRY_MAX_WAIT if max_wait is None else max_wait

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(httpx.HTTPError),
        reraise=True,
    ):
        with attempt:
            n = attempt.retry_state.attempt_number
            if n > 1:
                logger.warning(f"Retrying GET {url} (attempt {n}/{attempts})")
            async with httpx.AsyncClient(
                timeout=timeout or settings.FETCH_TIMEOUT,
                headers=headers,
                transport=transport,
            ) as client:
                r = await client.get(url, params=params or None)
                r.raise_for_status()
                return r
