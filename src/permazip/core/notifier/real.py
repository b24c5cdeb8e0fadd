"""Webhook notifier posting JSON with httpx."""

import logging
from typing import Any

import httpx

from permazip.core.notifier.abc import Notifier

logger = logging.getLogger(__name__)


class HttpNotifier(Notifier):
    """POSTs each payload as JSON to a webhook URL."""

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self._url = url
        self._timeout = timeout

    def notify(self, payload: dict[str, Any]) -> None:
        try:
            response = httpx.post(self._url, json=payload, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Webhook notification to %s failed: %s", self._url, e)
            return
        logger.debug("Webhook notified for %s", payload.get("zipfile"))
