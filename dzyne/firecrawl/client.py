"""Firecrawl scrape API client

Thin httpx client for ``POST /v1/scrape``. Only the scrape endpoint is
used: it returns branding, screenshot, markdown and html formats for a
single page.
"""

import logging
from typing import Optional

import httpx

from ..config import Config
from ..errors import IngestionError

logger = logging.getLogger(__name__)

SCRAPE_FORMATS = ("branding", "screenshot", "markdown", "html")


class FirecrawlClient:
    """HTTP client for the Firecrawl scrape endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = 60.0,
    ):
        """
        Args:
            api_key: Firecrawl API key (defaults to FIRECRAWL_API_KEY)
            api_url: Base URL (defaults to FIRECRAWL_API_URL)
            client: Optional preconfigured httpx.Client
            timeout: HTTP timeout for the internal client, in seconds
        """
        self.api_key = api_key or Config.FIRECRAWL_API_KEY
        self.api_url = (api_url or Config.FIRECRAWL_API_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def _headers(self) -> dict:
        if not self.api_key:
            raise IngestionError("FIRECRAWL_API_KEY is not configured")
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def scrape(self, url: str, formats: list[str], timeout_ms: int = 30000) -> dict:
        """Scrape one page and return the response ``data`` object.

        Raises:
            IngestionError: On transport errors, non-2xx responses or
                a response with ``success: false``
        """
        unknown = [f for f in formats if f not in SCRAPE_FORMATS]
        if unknown:
            raise IngestionError(f"Unsupported scrape formats: {', '.join(unknown)}", url=url)

        payload = {"url": url, "formats": list(formats), "timeout": timeout_ms}
        logger.debug(f"Scraping {url} with formats {formats}")

        try:
            response = self._client.post(
                f"{self.api_url}/v1/scrape",
                json=payload,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise IngestionError(f"Firecrawl request failed: {e}", url=url)

        if response.status_code >= 400:
            try:
                detail = response.json().get("error") or response.text
            except ValueError:
                detail = response.text
            raise IngestionError(
                f"Firecrawl returned {response.status_code}: {detail}",
                url=url,
                status_code=response.status_code,
            )

        body = response.json()
        if not body.get("success", False):
            raise IngestionError(body.get("error") or "Firecrawl scrape failed", url=url)

        return body.get("data") or {}

    def close(self) -> None:
        # A caller-supplied httpx.Client stays open for its owner
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
