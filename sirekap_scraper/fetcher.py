# sirekap_scraper/fetcher.py
import asyncio
import logging
from typing import Any, List

import httpx
from pydantic import TypeAdapter, ValidationError

from sirekap_scraper.config import Settings
from sirekap_scraper.exceptions import FetchError
from sirekap_scraper.levels import region_url, tally_url
from sirekap_scraper.models.region_model import Region, TallyTable
from sirekap_scraper.schemas import Anchor

logger = logging.getLogger(__name__)


def _retryable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


_regions_adapter = TypeAdapter(List[Region])


def create_client(settings: Settings) -> httpx.AsyncClient:
    """One client shared by every fetch of the run."""
    return httpx.AsyncClient(
        headers={"Accept": "application/json", "User-Agent": "sirekap-scraper"},
        timeout=settings.http_timeout,
        follow_redirects=True,
    )


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_attempts: int = 5,
    min_backoff: float = 0.5,
    max_backoff: float = 10.0,
) -> Any:
    """
    GET a JSON document, retrying transport errors and 429/5xx responses.

    Backoff doubles from min_backoff and is capped at max_backoff. Raises
    FetchError once attempts run out, on any other error status, or when the
    body is not JSON.
    """
    backoff = min_backoff
    last_error = "no attempt made"

    for attempt in range(1, max_attempts + 1):
        try:
            response = await client.get(url)
        except httpx.TransportError as e:
            last_error = f"{type(e).__name__}: {e}"
        else:
            logger.debug(f"GET {url} -> {response.status_code}")
            if response.status_code == 200:
                try:
                    return response.json()
                except ValueError as e:
                    raise FetchError(f"Invalid JSON from {url}: {e}", url=url) from e
            if not _retryable(response.status_code):
                raise FetchError(f"HTTP {response.status_code} from {url}", url=url)
            last_error = f"HTTP {response.status_code}"

        if attempt < max_attempts:
            logger.warning(
                f"GET {url} failed ({last_error}), attempt {attempt}/{max_attempts}; "
                f"retrying in {backoff:.1f}s"
            )
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, max_backoff)

    raise FetchError(f"Gave up on {url} after {max_attempts} attempts: {last_error}", url=url)


async def _get(client: httpx.AsyncClient, url: str, settings: Settings) -> Any:
    return await get_json(
        client,
        url,
        max_attempts=settings.max_attempts,
        min_backoff=settings.min_backoff,
        max_backoff=settings.max_backoff,
    )


def _build_url(builder, base_url: str, level: int, anchor: Anchor) -> str:
    try:
        return builder(base_url, level, anchor)
    except ValueError as e:
        raise FetchError(str(e)) from e


async def fetch_regions(
    client: httpx.AsyncClient, level: int, anchor: Anchor, settings: Settings
) -> List[Region]:
    url = _build_url(region_url, settings.region_base_url, level, anchor)
    payload = await _get(client, url, settings)
    try:
        return _regions_adapter.validate_python(payload)
    except ValidationError as e:
        raise FetchError(f"Unexpected region listing at {url}: {e}", url=url) from e


async def fetch_tallies(
    client: httpx.AsyncClient, level: int, anchor: Anchor, settings: Settings
) -> TallyTable:
    url = _build_url(tally_url, settings.tally_base_url, level, anchor)
    payload = await _get(client, url, settings)
    try:
        return TallyTable.model_validate(payload)
    except ValidationError as e:
        raise FetchError(f"Unexpected tally table at {url}: {e}", url=url) from e
