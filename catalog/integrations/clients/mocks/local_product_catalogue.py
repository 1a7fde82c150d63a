"""
Local Product Catalogue Client (Mock/Local).

Purpose:
- Acts as a development-time catalogue source when the real endpoint is not available.
- Loads the catalogue from a local JSON file shaped exactly like the upstream document.

Usage:
- Wired in catalog/dependencies.py when INTEGRATIONS_MODE is "mock" (the default)
- Called by ProductRepositoryImpl through the ProductRemoteDataSource interface

Swap:
Replace with clients/real_http/product_service.py once the catalogue URL is configured.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from catalog.integrations.contracts.interfaces import ProductRemoteDataSource
from catalog.integrations.contracts.products import ProductsResponse
from catalog.integrations.response_wrappers import (
    DeserializationError,
    TransportResponse,
    parse_products_response,
)

logger = logging.getLogger(__name__)


class LocalProductRemoteDataSource(ProductRemoteDataSource):
    """Serves the bundled catalogue file as if it came over HTTP."""

    def __init__(self, catalogue_path: Optional[Path] = None, status_code: int = 200) -> None:
        self.catalogue_path = catalogue_path or self._default_catalogue_path()
        self.status_code = status_code

    async def fetch_products(self) -> TransportResponse[ProductsResponse]:
        if not 200 <= self.status_code < 300:
            logger.info("[MOCK] Returning status %s for catalogue", self.status_code)
            return TransportResponse(status_code=self.status_code, reason="Mock error")

        logger.info("[MOCK] Loading catalogue from %s", self.catalogue_path)
        try:
            raw = json.loads(self.catalogue_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise DeserializationError(f"Invalid JSON in {self.catalogue_path}: {exc}") from exc
        return TransportResponse(status_code=self.status_code, reason="OK", body=parse_products_response(raw))

    @staticmethod
    def _default_catalogue_path() -> Path:
        return Path(__file__).resolve().parents[4] / "data" / "products-test.json"
