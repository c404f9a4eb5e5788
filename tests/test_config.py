import pytest

from sirekap_scraper.config import MAX_DEPTH, REGION_BASE_URL, Settings
from sirekap_scraper.exceptions import ConfigError


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "MONGO_URI",
        "MONGO_DB",
        "MONGO_COLLECTION",
        "FETCH_CHUNK_SIZE",
        "INSERT_BATCH_SIZE",
        "MAX_LEVEL",
        "HTTP_MAX_ATTEMPTS",
        "SIREKAP_REGION_BASE",
        "SIREKAP_TALLY_BASE",
        "HTTP_MIN_BACKOFF",
        "HTTP_MAX_BACKOFF",
        "HTTP_TIMEOUT",
        "LOG_LEVEL",
    ):
        # setenv first so the prior value is restored afterwards
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def no_dotenv(tmp_path):
    # A path that does not exist, so a developer .env is never picked up
    return str(tmp_path / "absent.env")


def test_defaults(clean_env, no_dotenv):
    clean_env.setenv("MONGO_URI", "mongodb://db:27017")

    settings = Settings.from_env(dotenv_path=no_dotenv)

    assert settings.mongo_uri == "mongodb://db:27017"
    assert settings.region_base_url == REGION_BASE_URL
    assert settings.max_level == MAX_DEPTH
    assert settings.chunk_size == 50
    assert settings.batch_size == 1000


def test_env_and_overrides(clean_env, no_dotenv):
    clean_env.setenv("MONGO_URI", "mongodb://db:27017")
    clean_env.setenv("FETCH_CHUNK_SIZE", "20")
    clean_env.setenv("INSERT_BATCH_SIZE", "500")

    settings = Settings.from_env(dotenv_path=no_dotenv, chunk_size=None, batch_size=100, max_level=3)

    assert settings.chunk_size == 20
    assert settings.batch_size == 100
    assert settings.max_level == 3


def test_dotenv_file_is_read(clean_env, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("MONGO_URI=mongodb://from-file:27017\nMONGO_DB=pilpres\n")

    settings = Settings.from_env(dotenv_path=str(env_file))

    assert settings.mongo_uri == "mongodb://from-file:27017"
    assert settings.mongo_db == "pilpres"


def test_missing_uri(clean_env, no_dotenv):
    with pytest.raises(ConfigError):
        Settings.from_env(dotenv_path=no_dotenv)


@pytest.mark.parametrize("key, value", [("FETCH_CHUNK_SIZE", "lots"), ("MAX_LEVEL", "6")])
def test_invalid_values(clean_env, no_dotenv, key, value):
    clean_env.setenv("MONGO_URI", "mongodb://db:27017")
    clean_env.setenv(key, value)

    with pytest.raises(ConfigError):
        Settings.from_env(dotenv_path=no_dotenv)


def test_dotenv_found_from_working_directory(clean_env, tmp_path):
    (tmp_path / ".env").write_text("MONGO_URI=mongodb://from-cwd:27017\n")
    clean_env.chdir(tmp_path)

    settings = Settings.from_env()

    assert settings.mongo_uri == "mongodb://from-cwd:27017"


def test_inverted_backoff_is_rejected(clean_env, no_dotenv):
    clean_env.setenv("MONGO_URI", "mongodb://db:27017")
    clean_env.setenv("HTTP_MIN_BACKOFF", "5")
    clean_env.setenv("HTTP_MAX_BACKOFF", "1")

    with pytest.raises(ConfigError):
        Settings.from_env(dotenv_path=no_dotenv)
