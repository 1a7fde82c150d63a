"""Product detail screen state holder."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Optional, Union

from catalog.core.async_result import UNINITIALIZED, AsyncResult
from catalog.core.state_container import StateContainer, UsageError
from catalog.integrations.contracts.products import Product
from catalog.usecases.products import FindProductUseCase


@dataclass(frozen=True)
class ProductDetailState:
    product_id: Optional[int] = None
    product: AsyncResult[Product] = UNINITIALIZED


@dataclass(frozen=True)
class LoadProduct:
    product_id: int


@dataclass(frozen=True)
class NavigateBack:
    pass


ProductDetailAction = Union[LoadProduct, NavigateBack]


@dataclass(frozen=True)
class NavigateUp:
    pass


ProductDetailEffect = NavigateUp


class ProductDetailViewModel:
    def __init__(self, find_product_use_case: FindProductUseCase) -> None:
        self.find_product_use_case = find_product_use_case
        self.container: StateContainer[ProductDetailState, ProductDetailAction, ProductDetailEffect] = StateContainer(
            ProductDetailState(), on_action=self.on_action, name="ProductDetailViewModel"
        )

    @property
    def state(self) -> ProductDetailState:
        return self.container.get_state()

    def submit_action(self, action: ProductDetailAction):
        return self.container.submit_action(action)

    def load_product(self, product_id: int) -> asyncio.Task:
        self.container.set_state(lambda s: replace(s, product_id=product_id))
        # Keep showing the current product while a different one loads.
        return self.container.run_async(
            lambda: self.find_product_use_case(product_id),
            lambda s, result: replace(s, product=result),
            retain=lambda s: s.product,
        )

    def on_action(self, action: ProductDetailAction):
        if isinstance(action, LoadProduct):
            return self.load_product(action.product_id)
        if isinstance(action, NavigateBack):
            self.container.send_effect(NavigateUp())
            return None
        raise UsageError(f"Unsupported product detail action: {action!r}")

    async def aclose(self) -> None:
        await self.container.aclose()
