"""
Catalogue repository.

Turns the transport-level response of a ProductRemoteDataSource into the
domain payload:
- 2xx with a body -> ProductsResponse
- non-2xx -> TransportError
- 2xx without a body -> EmptyBodyError
"""

import logging

from catalog.integrations.contracts.interfaces import ProductRemoteDataSource, ProductRepository
from catalog.integrations.contracts.products import ProductsResponse
from catalog.integrations.response_wrappers import safe_api_call

logger = logging.getLogger(__name__)


class ProductRepositoryImpl(ProductRepository):
    def __init__(self, data_source: ProductRemoteDataSource):
        self.data_source = data_source

    async def fetch_products(self) -> ProductsResponse:
        response = await self.data_source.fetch_products()
        catalogue = safe_api_call(response)
        logger.debug("Catalogue loaded: %d products", len(catalogue.products))
        return catalogue
