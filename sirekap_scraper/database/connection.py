import logging

import motor.motor_asyncio
from pymongo.errors import ConfigurationError

from sirekap_scraper.config import Settings
from sirekap_scraper.exceptions import ConfigError

logger = logging.getLogger(__name__)


def create_client(settings: Settings) -> motor.motor_asyncio.AsyncIOMotorClient:
    # InvalidURI is a ConfigurationError; both mean the MONGO_URI is unusable
    try:
        return motor.motor_asyncio.AsyncIOMotorClient(settings.mongo_uri)
    except ConfigurationError as e:
        raise ConfigError(f"Invalid MONGO_URI: {e}") from e


def results_collection(client: motor.motor_asyncio.AsyncIOMotorClient, settings: Settings):
    db = client[settings.mongo_db]
    logger.info(f"Writing results to {settings.mongo_db}.{settings.mongo_collection}")
    return db.get_collection(settings.mongo_collection)
