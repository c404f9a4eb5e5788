# sirekap_scraper/exceptions.py
from typing import Optional


class ConfigError(Exception):
    """Raised when required settings are missing or malformed."""


class FetchError(Exception):
    """
    A single hierarchy node could not be fetched or decoded.

    Carries the URL that failed so the run summary can point at it.
    """

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url
