import asyncio
import logging
from typing import List, Sequence

from pymongo import ReplaceOne
from pymongo.errors import BulkWriteError

from sirekap_scraper.batching import chunked
from sirekap_scraper.models.result_model import ResultRecord
from sirekap_scraper.schemas import BatchFailure

logger = logging.getLogger(__name__)


# Write one batch; upserting on the region code keeps re-runs idempotent
async def insert_batch(collection, records: Sequence[ResultRecord]):
    operations = [
        ReplaceOne({"_id": record.code}, record.to_document(), upsert=True)
        for record in records
    ]
    return await collection.bulk_write(operations, ordered=False)


# Persist a level's records in concurrent batches and report the ones that failed
async def insert_results(
    collection, label: str, records: Sequence[ResultRecord], batch_size: int
) -> List[BatchFailure]:
    batches = chunked(records, batch_size)
    if not batches:
        logger.info(f"[{label}] nothing to insert")
        return []

    logger.info(f"[{label}] inserting {len(records)} records in {len(batches)} batch(es)")
    outcomes = await asyncio.gather(
        *(insert_batch(collection, batch) for batch in batches),
        return_exceptions=True,
    )

    failures = []
    for index, (batch, outcome) in enumerate(zip(batches, outcomes)):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            error = _describe(outcome)
            logger.error(f"[{label}] batch {index} ({len(batch)} records) failed: {error}")
            failures.append(
                BatchFailure(label=label, batch_index=index, size=len(batch), error=error)
            )
        else:
            logger.debug(f"[{label}] batch {index} written ({len(batch)} records)")

    logger.info(f"[{label}] {len(batches) - len(failures)}/{len(batches)} batch(es) written")
    return failures


def _describe(error: BaseException) -> str:
    if isinstance(error, BulkWriteError):
        write_errors = error.details.get("writeErrors", [])
        return f"bulk write error ({len(write_errors)} write error(s)): {error}"
    return f"{type(error).__name__}: {error}"
