"""Async client for the Granola documents API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from granola_md.config.models import APIConfig
from granola_md.errors import GranolaAPIError

logger = logging.getLogger(__name__)

USER_AGENT = "granola-md"


class GranolaClient:
    """POSTs to ``/v2/get-documents`` with a bearer token.

    One request per call and no retry policy: a 429 surfaces as a retryable
    GranolaAPIError and the caller decides what to do.
    """

    def __init__(self, config: APIConfig, token: str) -> None:
        if not token:
            raise ValueError("Granola API token must not be empty")
        self.config = config
        self._token = token
        self._url = f"{config.base_url.rstrip('/')}/v2/get-documents"

    async def get_documents(self, limit: int | None = None, offset: int = 0) -> dict[str, Any]:
        """Fetch one page. Returns the decoded JSON body."""
        payload = {"limit": limit or self.config.page_size, "offset": offset}
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                resp = await client.post(self._url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise GranolaAPIError(f"Granola API request failed: {e}") from e

        if resp.status_code == 429:
            raise GranolaAPIError(
                "Rate limit exceeded. Please try again later.",
                status_code=429,
                retryable=True,
            )
        if resp.status_code >= 400:
            raise GranolaAPIError(
                f"API request failed: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
                retryable=resp.status_code >= 500,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise GranolaAPIError("Granola API returned invalid JSON") from e
        if not isinstance(data, dict):
            raise GranolaAPIError("Granola API returned an unexpected payload")
        return data

    async def iter_documents(self) -> AsyncIterator[dict[str, Any]]:
        """Yield every document across all pages."""
        offset = 0
        limit = self.config.page_size

        while True:
            page = await self.get_documents(limit=limit, offset=offset)
            docs = page_documents(page)
            logger.debug("Fetched %d documents at offset %d", len(docs), offset)
            for doc in docs:
                yield doc

            if not docs or not page.get("has_more"):
                return
            offset += limit
            await asyncio.sleep(self.config.page_delay)


def page_documents(payload: Any) -> list[dict[str, Any]]:
    """Document list from an API page or JSON dump (``documents`` or ``docs``)."""
    if isinstance(payload, list):
        docs = payload
    elif isinstance(payload, dict):
        docs = payload.get("documents", payload.get("docs"))
    else:
        docs = None
    if not isinstance(docs, list):
        return []
    return [doc for doc in docs if isinstance(doc, dict)]
