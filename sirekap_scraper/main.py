# sirekap_scraper/main.py
import argparse
import asyncio
import logging
import sys
import time
from typing import List, Optional

from sirekap_scraper import fetcher
from sirekap_scraper.config import MAX_DEPTH, Settings
from sirekap_scraper.database import connection
from sirekap_scraper.exceptions import ConfigError
from sirekap_scraper.orchestrator import VoteCrawler
from sirekap_scraper.schemas import RunSummary

logger = logging.getLogger("sirekap_scraper")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl Sirekap presidential vote tallies into MongoDB"
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file (default: nearest .env from the current directory up)",
    )
    parser.add_argument("--chunk-size", type=int, help="Parents fetched concurrently")
    parser.add_argument("--batch-size", type=int, help="Records per insert batch")
    parser.add_argument(
        "--max-level",
        type=int,
        choices=range(1, MAX_DEPTH + 1),
        help="Deepest level to crawl (1=province ... 5=polling station)",
    )
    return parser.parse_args(argv)


async def crawl(settings: Settings) -> RunSummary:
    mongo = connection.create_client(settings)
    try:
        collection = connection.results_collection(mongo, settings)
        async with fetcher.create_client(settings) as http:
            crawler = VoteCrawler(settings, http, collection)
            return await crawler.run()
    finally:
        mongo.close()


def report(summary: RunSummary) -> None:
    for level, count in summary.records_per_level().items():
        logger.info(f"Level {level}: {count} records")

    for failure in summary.node_failures:
        logger.error(
            f"FAILED node level={failure.level} parent={failure.parent_code or 'root'} "
            f"url={failure.url}: {failure.error}"
        )
    for failure in summary.batch_failures:
        logger.error(
            f"FAILED batch {failure.label}#{failure.batch_index} "
            f"({failure.size} records): {failure.error}"
        )

    if summary.ok:
        logger.info("✅ All levels fetched and stored")
    else:
        logger.error(
            f"❌ {len(summary.node_failures)} node(s) and "
            f"{len(summary.batch_failures)} batch(es) failed"
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = Settings.from_env(
            dotenv_path=args.env_file,
            chunk_size=args.chunk_size,
            batch_size=args.batch_size,
            max_level=args.max_level,
        )
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"❌ {e}")
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logger.info(
        f"Starting crawl: levels 1..{settings.max_level}, "
        f"chunk size {settings.chunk_size}, batch size {settings.batch_size}"
    )

    start_time = time.perf_counter()
    try:
        summary = asyncio.run(crawl(settings))
    except ConfigError as e:
        logger.error(f"❌ {e}")
        return 2
    report(summary)
    logger.info(f"🏁 Finished in {time.perf_counter() - start_time:.2f} seconds")
    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
