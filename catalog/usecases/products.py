"""Catalogue use cases consumed by the feature view models."""

from __future__ import annotations

from catalog.integrations.contracts.interfaces import ProductRepository
from catalog.integrations.contracts.products import Product, ProductsResponse


class ProductNotFoundError(LookupError):
    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product {product_id} is not in the catalogue")
        self.product_id = product_id


class FetchProductsUseCase:
    def __init__(self, product_repository: ProductRepository) -> None:
        self.product_repository = product_repository

    async def __call__(self) -> ProductsResponse:
        return await self.product_repository.fetch_products()


class FindProductUseCase:
    """Fetch the catalogue and pick one product by id."""

    def __init__(self, product_repository: ProductRepository) -> None:
        self.product_repository = product_repository

    async def __call__(self, product_id: int) -> Product:
        catalogue = await self.product_repository.fetch_products()
        product = catalogue.find(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product
