"""
Products list screen state holder.

Fetches the catalogue once on creation and exposes the result as
``ProductsState.products_response``. Selecting or rating a product produces
one-shot effects for the presentation layer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from catalog.core.async_result import UNINITIALIZED, AsyncResult
from catalog.core.state_container import StateContainer, UsageError
from catalog.error_handler import ErrorHandler
from catalog.integrations.contracts.products import ProductsResponse
from catalog.usecases.products import FetchProductsUseCase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductsState:
    products_response: AsyncResult[ProductsResponse] = UNINITIALIZED


# Actions


@dataclass(frozen=True)
class RefreshProducts:
    pass


@dataclass(frozen=True)
class SelectProduct:
    product_id: int


@dataclass(frozen=True)
class RateProduct:
    product_id: int
    rating: float


ProductsAction = Union[RefreshProducts, SelectProduct, RateProduct]


# Effects


@dataclass(frozen=True)
class NavigateToProductDetail:
    product_id: int


@dataclass(frozen=True)
class ShowToast:
    message: str


ProductsEffect = Union[NavigateToProductDetail, ShowToast]


def _with_products(state: ProductsState, result: AsyncResult[ProductsResponse]) -> ProductsState:
    return replace(state, products_response=result)


class ProductsViewModel:
    def __init__(
        self,
        fetch_products_use_case: FetchProductsUseCase,
        error_handler: Optional[ErrorHandler] = None,
        autoload: bool = True,
    ) -> None:
        self.fetch_products_use_case = fetch_products_use_case
        self.error_handler = error_handler or ErrorHandler()
        self.last_fetch: Optional[asyncio.Task] = None
        self.container: StateContainer[ProductsState, ProductsAction, ProductsEffect] = StateContainer(
            ProductsState(), on_action=self.on_action, name="ProductsViewModel"
        )
        self.container.observe_async_result(lambda s: s.products_response, on_fail=self._on_fetch_failed)
        if autoload:
            self.fetch_products()

    @property
    def state(self) -> ProductsState:
        return self.container.get_state()

    def submit_action(self, action: ProductsAction):
        return self.container.submit_action(action)

    def fetch_products(self, retain_previous: bool = False) -> asyncio.Task:
        self.last_fetch = self.container.run_async(
            self.fetch_products_use_case,
            _with_products,
            retain=(lambda s: s.products_response) if retain_previous else None,
        )
        return self.last_fetch

    async def wait_until_loaded(self) -> ProductsState:
        """Wait for the most recent fetch to settle and return the state."""
        if self.last_fetch is not None:
            await asyncio.wait([self.last_fetch])
        return self.state

    def on_action(self, action: ProductsAction):
        if isinstance(action, RefreshProducts):
            return self.fetch_products(retain_previous=True)
        if isinstance(action, SelectProduct):
            self.container.send_effect(NavigateToProductDetail(product_id=action.product_id))
            return None
        if isinstance(action, RateProduct):
            self.container.send_effect(ShowToast(message=f"{action.rating:g}"))
            return None
        raise UsageError(f"Unsupported products action: {action!r}")

    def _on_fetch_failed(self, error: BaseException) -> None:
        logger.info("Products fetch failed: %s", error)
        payload = self.error_handler.handle_exception(error, context={"screen": "products"})
        self.container.send_effect(ShowToast(message=payload["message"]))

    def close(self) -> None:
        self.container.close()

    async def aclose(self) -> None:
        await self.container.aclose()
