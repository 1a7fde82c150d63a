"""
Wiring for catalogue collaborators.

The selection of mock vs real clients happens here only.
"""

import logging
from pathlib import Path
from typing import Optional

from catalog.integrations.clients.mocks.local_product_catalogue import LocalProductRemoteDataSource
from catalog.integrations.clients.real_http.product_service import HttpProductRemoteDataSource, ProductService
from catalog.integrations.contracts.interfaces import ProductRemoteDataSource, ProductRepository
from catalog.integrations.product_repository import ProductRepositoryImpl
from catalog.usecases.products import FetchProductsUseCase, FindProductUseCase
from catalog.utils.config_loader import CatalogConfig

logger = logging.getLogger(__name__)


def build_remote_data_source(cfg: CatalogConfig) -> ProductRemoteDataSource:
    if cfg.integrations.mode == "real":
        if not cfg.api.base_url:
            logger.warning("INTEGRATIONS_MODE=real but no catalogue URL configured; requests will fail.")
        service = ProductService(
            base_url=cfg.api.base_url,
            products_path=cfg.api.products_path,
            timeout_seconds=cfg.api.timeout_seconds,
        )
        return HttpProductRemoteDataSource(service)

    local_path: Optional[Path] = None
    if cfg.integrations.local_catalogue_path:
        local_path = Path(cfg.integrations.local_catalogue_path)
    return LocalProductRemoteDataSource(catalogue_path=local_path)


def build_product_repository(cfg: CatalogConfig) -> ProductRepository:
    return ProductRepositoryImpl(build_remote_data_source(cfg))


def build_fetch_products_use_case(cfg: CatalogConfig) -> FetchProductsUseCase:
    return FetchProductsUseCase(build_product_repository(cfg))


def build_find_product_use_case(cfg: CatalogConfig) -> FindProductUseCase:
    return FindProductUseCase(build_product_repository(cfg))
