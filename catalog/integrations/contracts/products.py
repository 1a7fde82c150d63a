"""
Product catalogue contracts.

Defines the catalogue payload served by the upstream JSON endpoint:

    {
      "filters": ["..."],
      "header": {"headerTitle": "...", "headerDescription": "..."},
      "products": [{"id": 1, "name": "...", "price": {"currency": "EUR", "value": 9.99}, ...}]
    }

These contracts must be used by both:
- clients/mocks/local_product_catalogue.py (bundled JSON for development/testing)
- clients/real_http/product_service.py (the real catalogue endpoint)

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Header(_Contract):
    header_title: str = Field(alias="headerTitle")
    header_description: str = Field(alias="headerDescription")


class Price(_Contract):
    currency: str
    value: float

    def label(self) -> str:
        return f"{self.value:.2f} {self.currency}"


class Product(_Contract):
    id: int
    name: str
    type: str
    available: bool
    color: str
    color_code: str = Field(alias="colorCode")
    description: str
    long_description: str = Field(alias="longDescription")
    image_url: str = Field(alias="imageURL")
    price: Price
    rating: float
    release_date: int = Field(alias="releaseDate")


class ProductsResponse(_Contract):
    filters: List[str]
    header: Header
    products: List[Product]

    def find(self, product_id: int) -> Product | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None
