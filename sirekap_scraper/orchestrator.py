"""
Level-by-level crawl of the Sirekap hierarchy.

Level 1 is a single root fetch. Every later level fans out one fetch unit
per record produced by the level above; parents are processed in chunks of
``settings.chunk_size`` so at most that many units are in flight. Each
level is persisted in full before the next one starts.
"""
import asyncio
import logging
from typing import List, Sequence, Tuple

import httpx

from sirekap_scraper.batching import chunked
from sirekap_scraper.config import Settings
from sirekap_scraper.crud import insert_results
from sirekap_scraper.exceptions import FetchError
from sirekap_scraper.fetcher import fetch_regions, fetch_tallies
from sirekap_scraper.joiner import join_votes
from sirekap_scraper.models.result_model import ResultRecord
from sirekap_scraper.schemas import (
    Anchor,
    ChildLevel,
    LevelReport,
    NodeFailure,
    RootLevel,
    RunSummary,
)

logger = logging.getLogger(__name__)


class VoteCrawler:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient, collection):
        self.settings = settings
        self.http = http_client
        self.collection = collection

    async def fetch_unit(self, level: int, anchor: Anchor) -> List[ResultRecord]:
        """Fetch one node's child regions and tallies and join them."""
        regions, tallies = await asyncio.gather(
            fetch_regions(self.http, level, anchor, self.settings),
            fetch_tallies(self.http, level, anchor, self.settings),
            return_exceptions=True,
        )
        for outcome in (regions, tallies):
            if isinstance(outcome, BaseException):
                raise outcome
        return join_votes(regions, tallies, anchor, level)

    async def fetch_level(
        self, level: int, parents: Sequence[ResultRecord]
    ) -> Tuple[List[ResultRecord], List[NodeFailure]]:
        """Fan out over ``parents`` chunk by chunk, keeping whatever succeeds."""
        if level == 1:
            anchors: List[Anchor] = [RootLevel()]
        else:
            anchors = [ChildLevel(parent=parent) for parent in parents]

        records: List[ResultRecord] = []
        failures: List[NodeFailure] = []
        chunks = chunked(anchors, self.settings.chunk_size)

        for index, chunk in enumerate(chunks, start=1):
            outcomes = await asyncio.gather(
                *(self.fetch_unit(level, anchor) for anchor in chunk),
                return_exceptions=True,
            )
            for anchor, outcome in zip(chunk, outcomes):
                if isinstance(outcome, BaseException):
                    failures.append(self._node_failure(level, anchor, outcome))
                else:
                    records.extend(outcome)

            logger.info(
                f"Level {level}: chunk {index}/{len(chunks)} done, "
                f"{len(records)} records, {len(failures)} failed node(s)"
            )

        return records, failures

    async def run_level(
        self, level: int, parents: Sequence[ResultRecord]
    ) -> Tuple[List[ResultRecord], LevelReport]:
        records, node_failures = await self.fetch_level(level, parents)
        batch_failures = await insert_results(
            self.collection, f"level {level}", records, self.settings.batch_size
        )
        report = LevelReport(
            level=level,
            parents=len(parents) if level > 1 else 0,
            records=len(records),
            node_failures=node_failures,
            batch_failures=batch_failures,
        )
        return records, report

    async def run(self) -> RunSummary:
        summary = RunSummary()
        parents: List[ResultRecord] = []

        for level in range(1, self.settings.max_level + 1):
            if level > 1 and not parents:
                logger.warning(f"No parents left for level {level}; stopping")
                break

            logger.info(f"Level {level}: starting with {len(parents)} parent(s)")
            parents, report = await self.run_level(level, parents)
            summary.levels.append(report)

        logger.info("Crawl done")
        return summary

    @staticmethod
    def _node_failure(level: int, anchor: Anchor, error: BaseException) -> NodeFailure:
        if not isinstance(error, Exception):
            raise error

        parent_code = anchor.parent.code if isinstance(anchor, ChildLevel) else None
        url = error.url if isinstance(error, FetchError) else None
        if isinstance(error, FetchError):
            logger.error(f"Level {level}: node {parent_code or 'root'} failed: {error}")
        else:
            logger.exception(
                f"Level {level}: node {parent_code or 'root'} failed unexpectedly",
                exc_info=error,
            )
        return NodeFailure(level=level, parent_code=parent_code, url=url, error=str(error))
