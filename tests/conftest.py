import asyncio
from collections import Counter

import httpx
import pytest

from sirekap_scraper.config import Settings

R = "https://regions.test/wilayah/pemilu/ppwp"
T = "https://tallies.test/pemilu/hhcw/ppwp"


class FakeCollection:
    """Stands in for a motor collection; records every bulk_write call."""

    def __init__(self, fail_on_call=()):
        self.calls = []
        self.fail_on_call = set(fail_on_call)

    async def bulk_write(self, operations, ordered=True):
        index = len(self.calls)
        self.calls.append(list(operations))
        await asyncio.sleep(0)
        if index in self.fail_on_call:
            raise ConnectionError(f"write {index} refused")
        return {"acknowledged": True, "n": len(operations)}


class FakeSite:
    """
    Serves JSON by URL through httpx.MockTransport.

    A route value may be a JSON-able object, or an int status code to
    respond with an empty body of that status every time.
    """

    def __init__(self, routes):
        self.routes = routes
        self.hits = Counter()

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.hits[url] += 1
        if url not in self.routes:
            return httpx.Response(404)
        body = self.routes[url]
        if isinstance(body, int):
            return httpx.Response(body)
        return httpx.Response(200, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings():
    return Settings(
        mongo_uri="mongodb://localhost:27017",
        region_base_url=R,
        tally_base_url=T,
        max_attempts=2,
        min_backoff=0,
        max_backoff=0,
        chunk_size=2,
        batch_size=2,
    )


def region(nama, kode, tingkat, id=1):
    return {"nama": nama, "id": id, "kode": kode, "tingkat": tingkat}


@pytest.fixture
def site_routes():
    """A small slice of the hierarchy, DKI Jakarta down to one polling station."""
    return {
        f"{R}/0.json": [region("DKI JAKARTA", "31", 1, id=31)],
        f"{T}.json": {
            "ts": "2024-02-20 10:00:00",
            "table": {"31": {"100025": 10, "100026": 5, "psu": "Provinsi", "persen": 61.5}},
        },
        f"{R}/31.json": [
            region("KOTA ADM. JAKARTA SELATAN", "3171", 2, id=3171),
            region("KOTA ADM. JAKARTA TIMUR", "3172", 2, id=3172),
        ],
        f"{T}/31.json": {
            "table": {"3171": {"100025": 7, "100026": 3, "100027": 1, "psu": "Kabupaten"}}
        },
        f"{R}/31/3171.json": [region("TEBET", "317101", 3, id=317101)],
        f"{T}/31/3171.json": {"table": {"317101": {"100025": 4, "psu": "Kecamatan"}}},
        # Jakarta Timur is down for the whole run
        f"{R}/31/3172.json": 503,
        f"{T}/31/3172.json": 503,
        f"{R}/31/3171/317101.json": [region("MANGGARAI", "3171011001", 4, id=3171011001)],
        f"{T}/31/3171/317101.json": {"table": None},
        f"{R}/31/3171/317101/3171011001.json": [
            region("TPS 001", "3171011001001", 5, id=900001),
            region("TPS 002", "3171011001002", 5, id=900002),
            region("TPS 003", "3171011001003", 5, id=900003),
        ],
        f"{T}/31/3171/317101/3171011001.json": {
            "table": {
                "3171011001001": {
                    "100025": 120,
                    "100026": 80,
                    "100027": 15,
                    "psu": "TPS",
                    "status_progress": False,
                },
                "3171011001002": {"100025": 99, "psu": "TPS", "status_progress": True},
            }
        },
    }
