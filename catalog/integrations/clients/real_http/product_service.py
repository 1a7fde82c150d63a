"""
Product Catalogue HTTP Client.

Purpose:
- Fetches the product catalogue JSON document from the configured endpoint
- Wraps the HTTP exchange into a TransportResponse shaped by our contracts

Usage:
- Wired in catalog/dependencies.py when INTEGRATIONS_MODE is "real"
- Called by ProductRepositoryImpl through the ProductRemoteDataSource interface

Implementation notes:
- Uses httpx for async requests
- Connection problems become TransportError; non-2xx statuses come back as a
  TransportResponse without a body and are judged by the repository
- Malformed JSON becomes DeserializationError

Important:
- This client should be the ONLY place that talks HTTP for catalogue data.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Optional

import httpx

from catalog.integrations.contracts.interfaces import ProductRemoteDataSource
from catalog.integrations.contracts.products import ProductsResponse
from catalog.integrations.response_wrappers import (
    DeserializationError,
    TransportError,
    TransportResponse,
    parse_products_response,
)

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTS_PATH = "/products-test.json"


class ProductService:
    def __init__(
        self,
        base_url: Optional[str] = None,
        products_path: Optional[str] = None,
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("CATALOG_API_URL", "")).rstrip("/")
        self.products_path = products_path or os.getenv("CATALOG_PRODUCTS_PATH", DEFAULT_PRODUCTS_PATH)
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        if not self.base_url:
            logger.warning("Catalogue API URL is not set.")

    @property
    def products_url(self) -> str:
        path = self.products_path if self.products_path.startswith("/") else f"/{self.products_path}"
        return f"{self.base_url}{path}"

    async def get_products(self) -> TransportResponse[ProductsResponse]:
        if not self.base_url:
            raise TransportError("CATALOG_API_URL is not configured.")

        url = self.products_url
        headers: Dict[str, str] = {"Accept": "application/json"}
        logger.info("Fetching product catalogue from %s", url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
        except httpx.RequestError as exc:
            logger.error("Request error connecting to catalogue API: %s", exc)
            raise TransportError(f"Could not reach catalogue API: {exc}") from exc

        logger.info("Received catalogue response: status=%s", response.status_code)
        body: Optional[ProductsResponse] = None
        if response.is_success and response.content:
            try:
                raw = response.json()
            except ValueError as exc:
                logger.error("Catalogue API returned invalid JSON: %s", exc)
                raise DeserializationError(f"Invalid JSON in catalogue response: {exc}") from exc
            body = parse_products_response(raw)
        elif not response.is_success:
            logger.warning("Catalogue API error: %s %s", response.status_code, response.reason_phrase)

        return TransportResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            body=body,
        )


class HttpProductRemoteDataSource(ProductRemoteDataSource):
    def __init__(self, service: ProductService) -> None:
        self.service = service

    async def fetch_products(self) -> TransportResponse[ProductsResponse]:
        return await self.service.get_products()
