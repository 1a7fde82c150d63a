"""
Integrations layer.
This package contains all code used to communicate with the catalogue source:
- the real catalogue JSON endpoint (clients/real_http)
- the bundled local catalogue file (clients/mocks)

Key rule:
- Features MUST NOT call the catalogue endpoint directly.
- Features go through use cases -> ProductRepository -> ProductRemoteDataSource.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (catalog/dependencies.py).
"""

from .response_wrappers import (
    DeserializationError,
    EmptyBodyError,
    IntegrationResponseError,
    TransportError,
    TransportResponse,
    parse_products_response,
    safe_api_call,
    to_async_result,
)
from .contracts.interfaces import ProductRemoteDataSource, ProductRepository
from .contracts.products import Header, Price, Product, ProductsResponse
from .product_repository import ProductRepositoryImpl

__all__ = [
    # errors
    "IntegrationResponseError", "TransportError", "EmptyBodyError", "DeserializationError",
    # transport
    "TransportResponse", "safe_api_call", "to_async_result", "parse_products_response",
    # contracts
    "Header", "Price", "Product", "ProductsResponse",
    "ProductRemoteDataSource", "ProductRepository", "ProductRepositoryImpl",
]
