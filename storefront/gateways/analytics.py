# File: storefront/gateways/analytics.py
from typing import Any, Dict, Optional
import logging

import httpx

from storefront.core.errors import UpstreamError

logger = logging.getLogger(__name__)

class SheetsAnalyticsSink:
    """Appends flat records to a spreadsheet through a Google Apps Script web app."""

    def __init__(self, url: str, transport: Optional[httpx.BaseTransport] = None, timeout: float = 10.0):
        self.url = url
        self._transport = transport
        self._timeout = timeout

    def append(self, record: Dict[str, Any]) -> None:
        if not self.url:
            logger.debug(f"SHEETS_URL not set, dropping {record.get('action')} record")
            return
        try:
            # Apps Script answers with a redirect to the script output
            with httpx.Client(timeout=self._timeout, transport=self._transport, follow_redirects=True) as client:
                resp = client.post(self.url, json=record)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(f"Sheets integration error: {e}")
        logger.info(f"Appended {record.get('action')} record to sheets")
