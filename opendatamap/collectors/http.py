"""
Shared HTTP POST helper with retry logic

Used by the Overpass and Wikidata SPARQL clients.
"""

import time
import requests
from typing import Dict, Any
from loguru import logger

from ..config import APIConfig


def post_with_retries(
    url: str,
    data: Dict[str, Any],
    headers: Dict[str, str],
    api: APIConfig,
    service: str,
    retry_delay: float = None
) -> Dict[str, Any]:
    """
    POST a form-encoded request and decode the JSON body, retrying failures

    Timeouts, HTTP 429/504 and other request exceptions are retried with a
    linearly growing delay. Any other HTTP status fails immediately.

    Args:
        url: Endpoint URL
        data: Form fields
        headers: Request headers
        api: API configuration (timeouts, retries)
        service: Service name for log messages
        retry_delay: Initial delay between retries (increases with attempts)

    Returns:
        Decoded JSON response

    Raises:
        RuntimeError: If the request fails after all retries or the body is not JSON
    """
    retry_delay = api.retry_delay if retry_delay is None else retry_delay
    max_retries = api.max_retries

    for attempt in range(max_retries):
        try:
            response = requests.post(
                url,
                data=data,
                headers=headers,
                timeout=api.request_timeout
            )
            response.raise_for_status()
        except requests.exceptions.Timeout:
            wait_time = retry_delay * (attempt + 1)
            if attempt < max_retries - 1:
                logger.warning(f"{service} timeout (attempt {attempt + 1}/{max_retries}). Retrying in {wait_time}s...")
                time.sleep(wait_time)
                continue
            logger.error(f"{service} failed: timeout after {max_retries} attempts")
            raise RuntimeError(f"{service} timeout after {max_retries} attempts")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in [429, 504] and attempt < max_retries - 1:
                wait_time = retry_delay * (attempt + 1)
                logger.warning(f"{service} {status} (attempt {attempt + 1}/{max_retries}). Retrying in {wait_time}s...")
                time.sleep(wait_time)
                continue
            logger.error(f"{service} failed: HTTP {status}")
            raise RuntimeError(f"{service} HTTP error {status}") from e
        except requests.exceptions.RequestException as e:
            if attempt < max_retries - 1:
                logger.warning(f"{service} request failed (attempt {attempt + 1}): {e}")
                time.sleep(retry_delay * (attempt + 1))
                continue
            logger.error(f"{service} failed: request exception after {max_retries} attempts: {e}")
            raise RuntimeError(f"{service} request failed after {max_retries} attempts: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise RuntimeError(f"{service} returned malformed JSON: {e}") from e

    raise RuntimeError(f"{service} request was not attempted (max_retries={max_retries})")
