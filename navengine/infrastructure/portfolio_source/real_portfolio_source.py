"""
Real portfolio source
Fetches the fund's positions from the backend positions endpoint.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import httpx

from navengine.domain.models import Position
from navengine.infrastructure.repositories.position_repository import parse_positions

logger = logging.getLogger(__name__)


class PortfolioSourceError(RuntimeError):
    """The real positions backend could not supply a usable position set."""


class RealPortfolioSource:
    def __init__(self, url: str, api_key: Optional[str] = None, timeout_seconds: float = 10.0):
        if not url:
            raise ValueError("Real portfolio source URL is required")
        self.url = url
        self.api_key = (api_key or "").strip() or None
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def fetch_positions(self) -> List[Position]:
        """
        Fetch and validate the real position set.

        Accepts either a bare JSON array or {"positions": [...]}.

        Raises:
            PortfolioSourceError: on transport errors, non-200 responses or
                payloads that do not validate
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(self.url, headers=self._headers())
        except httpx.HTTPError as exc:
            raise PortfolioSourceError(f"positions request failed: {exc}") from exc

        if response.status_code != 200:
            raise PortfolioSourceError(
                f"positions endpoint returned {response.status_code}: {(response.text or '')[:200]}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise PortfolioSourceError("positions endpoint returned invalid JSON") from exc

        if isinstance(payload, dict) and "positions" in payload:
            payload = payload["positions"]

        try:
            positions = parse_positions(payload)
        except ValueError as exc:
            raise PortfolioSourceError(str(exc)) from exc

        logger.debug("Fetched %s real positions", len(positions))
        return positions
