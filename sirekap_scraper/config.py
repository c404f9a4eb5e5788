# sirekap_scraper/config.py
# Central place for endpoints, tunables and the Mongo target
import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, model_validator

from sirekap_scraper.exceptions import ConfigError

REGION_BASE_URL = "https://sirekap-obj-data.kpu.go.id/wilayah/pemilu/ppwp"
TALLY_BASE_URL = "https://sirekap-obj-data.kpu.go.id/pemilu/hhcw/ppwp"

# Province -> regency -> district -> village -> polling station (TPS)
MAX_DEPTH = 5

DEFAULT_MONGO_DB = "pemilu"
DEFAULT_COLLECTION = "ppwp_results"


class Settings(BaseModel):
    mongo_uri: str
    mongo_db: str = DEFAULT_MONGO_DB
    mongo_collection: str = DEFAULT_COLLECTION

    region_base_url: str = REGION_BASE_URL
    tally_base_url: str = TALLY_BASE_URL

    # HTTP retry policy
    max_attempts: int = Field(default=5, ge=1)
    min_backoff: float = Field(default=0.5, ge=0)
    max_backoff: float = Field(default=10.0, ge=0)
    http_timeout: float = Field(default=30.0, gt=0)

    # Parents fetched at once, and records per insert batch
    chunk_size: int = Field(default=50, ge=1)
    batch_size: int = Field(default=1000, ge=1)

    max_level: int = Field(default=MAX_DEPTH, ge=1, le=MAX_DEPTH)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _backoff_order(self):
        if self.min_backoff > self.max_backoff:
            raise ValueError(
                f"min_backoff ({self.min_backoff}) is larger than max_backoff ({self.max_backoff})"
            )
        return self

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides) -> "Settings":
        """
        Build settings from the environment (and a .env file if present).

        Keyword overrides win over the environment; None values are ignored
        so CLI flags that were not given fall through.
        """
        # Without an explicit path, look for .env from the working directory up
        load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True))

        mongo_uri = os.getenv("MONGO_URI")
        if not mongo_uri:
            raise ConfigError("MONGO_URI not found. Check your environment or .env file.")

        values = {
            "mongo_uri": mongo_uri,
            "mongo_db": os.getenv("MONGO_DB", DEFAULT_MONGO_DB),
            "mongo_collection": os.getenv("MONGO_COLLECTION", DEFAULT_COLLECTION),
            "region_base_url": os.getenv("SIREKAP_REGION_BASE", REGION_BASE_URL),
            "tally_base_url": os.getenv("SIREKAP_TALLY_BASE", TALLY_BASE_URL),
            "max_attempts": _env_number("HTTP_MAX_ATTEMPTS", int, 5),
            "min_backoff": _env_number("HTTP_MIN_BACKOFF", float, 0.5),
            "max_backoff": _env_number("HTTP_MAX_BACKOFF", float, 10.0),
            "http_timeout": _env_number("HTTP_TIMEOUT", float, 30.0),
            "chunk_size": _env_number("FETCH_CHUNK_SIZE", int, 50),
            "batch_size": _env_number("INSERT_BATCH_SIZE", int, 1000),
            "max_level": _env_number("MAX_LEVEL", int, MAX_DEPTH),
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def _env_number(key: str, cast, default):
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")
