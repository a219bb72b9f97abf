"""
Overpass API client

Handles communication with Overpass API including:
- Rate limiting
- Retry logic
- Error handling
"""

import time
from typing import Dict, Any, Optional
from loguru import logger

from ..http import post_with_retries
from ...config import get_config, PipelineConfig


class OverpassAPIClient:
    """Client for interacting with Overpass API"""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or get_config()
        self.overpass_url = self.config.api.overpass_url
        self.timeout = self.config.api.overpass_timeout
        self._last_request_time = 0
        self._min_request_interval = self.config.api.min_request_interval

    def _rate_limit(self):
        """Ensure we don't exceed rate limits"""
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)
        self._last_request_time = time.time()

    def query(self, query: str, retry_delay: Optional[float] = None) -> Dict[str, Any]:
        """
        Execute Overpass API query with retry logic

        Args:
            query: Overpass QL query string
            retry_delay: Initial delay between retries (increases with attempts)

        Returns:
            JSON response from Overpass API

        Raises:
            RuntimeError: If query fails after all retries
        """
        self._rate_limit()
        logger.debug(f"Overpass query: {' '.join(query.split())}")

        headers = {
            "User-Agent": self.config.api.user_agent,
            "Content-Type": "application/x-www-form-urlencoded"
        }

        data = post_with_retries(
            self.overpass_url,
            data={"data": query},
            headers=headers,
            api=self.config.api,
            service="Overpass API",
            retry_delay=retry_delay
        )
        if not isinstance(data, dict):
            raise RuntimeError("Overpass API returned an unexpected payload")
        return data
