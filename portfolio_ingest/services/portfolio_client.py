import logging
from typing import Dict, Optional

import httpx

from portfolio_ingest.core.config import Settings, get_settings
from portfolio_ingest.core.errors import FetchError

logger = logging.getLogger(__name__)


class PortfolioClient:
    """Lightweight client for the DeBank token list endpoint.

    Bodies are returned verbatim; status codes are not inspected.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.url_template = self.settings.portfolio_url_template
        self.timeout = timeout if timeout is not None else self.settings.fetch_timeout_sec
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.settings.access_key:
            headers["AccessKey"] = self.settings.access_key
        self._client = httpx.Client(timeout=self.timeout, headers=headers, transport=transport)

    def url_for(self, address: str) -> str:
        return self.url_template.format(address=address)

    def fetch(self, address: str) -> str:
        url = self.url_for(address)
        try:
            resp = self._client.get(url)
            body = resp.content.decode(resp.encoding or "utf-8")
        except httpx.HTTPError as exc:
            raise FetchError(f"request for {address} failed: {exc}") from exc
        except (UnicodeDecodeError, LookupError) as exc:
            raise FetchError(f"unreadable response body for {address}: {exc}") from exc
        logger.debug("Fetched %s (status=%s, %d bytes)", address, resp.status_code, len(body))
        return body

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PortfolioClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
