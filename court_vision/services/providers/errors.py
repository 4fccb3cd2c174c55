"""Errors raised by external data provider clients."""
from typing import Optional


class ProviderError(Exception):
    """
    A provider request failed (network, HTTP status or unparseable body).

    Attributes:
        provider: Provider name ("espn", "balldontlie")
        url: Requested URL
        status_code: HTTP status when the server answered, else None
    """

    def __init__(self, provider: str, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider} request failed for {url}: {message}")
        self.provider = provider
        self.url = url
        self.status_code = status_code
