"""Pytest fixtures for catalogue tests."""

import json
from pathlib import Path

import httpx
import pytest

from catalog.integrations.clients.real_http.product_service import HttpProductRemoteDataSource, ProductService
from catalog.integrations.product_repository import ProductRepositoryImpl
from catalog.usecases.products import FetchProductsUseCase, FindProductUseCase

CATALOGUE_FILE = Path(__file__).parent.parent / "data" / "products-test.json"
BASE_URL = "https://catalog.test"


@pytest.fixture
def catalogue_payload():
    """The upstream catalogue document as decoded JSON."""
    return json.loads(CATALOGUE_FILE.read_text(encoding="utf-8"))


def make_repository(handler) -> ProductRepositoryImpl:
    """Repository over the real HTTP client, answered by ``handler(request)``."""
    service = ProductService(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return ProductRepositoryImpl(HttpProductRemoteDataSource(service))


@pytest.fixture
def ok_repository(catalogue_payload):
    return make_repository(lambda request: httpx.Response(200, json=catalogue_payload))


@pytest.fixture
def failing_repository():
    return make_repository(lambda request: httpx.Response(500, text="upstream exploded"))


@pytest.fixture
def fetch_products(ok_repository):
    return FetchProductsUseCase(ok_repository)


@pytest.fixture
def find_product(ok_repository):
    return FindProductUseCase(ok_repository)


@pytest.fixture
def repository_factory():
    return make_repository
