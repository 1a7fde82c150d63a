"""
FastAPI application - Main entry point

Serves the catalogue screens as JSON: the products list state, its queued
one-shot effects, per-product detail, and a websocket stream of list state.
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from catalog.core.async_result import Fail
from catalog.dependencies import build_fetch_products_use_case, build_find_product_use_case
from catalog.features.product_cards import ProductCardGenerator
from catalog.features.product_detail import ProductDetailViewModel
from catalog.features.products import (
    NavigateToProductDetail,
    ProductsViewModel,
    RateProduct,
    RefreshProducts,
    SelectProduct,
    ShowToast,
)
from catalog.integrations.response_wrappers import IntegrationResponseError
from catalog.usecases.products import FetchProductsUseCase, FindProductUseCase, ProductNotFoundError
from catalog.utils.config_loader import CatalogConfig, load_catalog_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

card_generator = ProductCardGenerator()

_EFFECT_TYPES = {
    NavigateToProductDetail: "navigate_to_product_detail",
    ShowToast: "show_toast",
}


class ProductActionRequest(BaseModel):
    type: Literal["refresh", "select_product", "rate_product"]
    product_id: Optional[int] = Field(default=None, description="Required for select_product and rate_product")
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0, description="Required for rate_product")


def _serialize_effect(effect: Any) -> Dict[str, Any]:
    return {"type": _EFFECT_TYPES.get(type(effect), type(effect).__name__), **asdict(effect)}


def _to_action(request: ProductActionRequest):
    if request.type == "refresh":
        return RefreshProducts()
    if request.product_id is None:
        raise HTTPException(status_code=400, detail=f"product_id is required for '{request.type}'.")
    if request.type == "select_product":
        return SelectProduct(product_id=request.product_id)
    if request.rating is None:
        raise HTTPException(status_code=400, detail="rating is required for 'rate_product'.")
    return RateProduct(product_id=request.product_id, rating=request.rating)


def create_app(
    cfg: Optional[CatalogConfig] = None,
    fetch_products_use_case: Optional[FetchProductsUseCase] = None,
    find_product_use_case: Optional[FindProductUseCase] = None,
) -> FastAPI:
    cfg = cfg or load_catalog_config()
    fetch_products = fetch_products_use_case or build_fetch_products_use_case(cfg)
    find_product = find_product_use_case or build_find_product_use_case(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting catalogue API (integrations mode: %s)", cfg.integrations.mode)
        app.state.products_vm = ProductsViewModel(fetch_products)
        try:
            yield
        finally:
            await app.state.products_vm.aclose()

    app = FastAPI(
        title="Product Catalogue API",
        description="Catalogue screens served as JSON state",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/v1/products")
    async def get_products(request: Request, wait: bool = Query(default=False)):
        vm: ProductsViewModel = request.app.state.products_vm
        state = await vm.wait_until_loaded() if wait else vm.state
        return card_generator.render_products(state.products_response)

    @app.post("/api/v1/products/actions")
    async def submit_product_action(request: Request, body: ProductActionRequest):
        vm: ProductsViewModel = request.app.state.products_vm
        vm.submit_action(_to_action(body))
        return {"accepted": True, "products": card_generator.render_products(vm.state.products_response)}

    @app.get("/api/v1/products/effects")
    async def get_product_effects(request: Request, timeout: float = Query(default=0.0, ge=0.0, le=30.0)):
        vm: ProductsViewModel = request.app.state.products_vm
        effects: List[Any] = []
        if timeout > 0 and vm.container.pending_effects == 0:
            try:
                effects.append(await asyncio.wait_for(vm.container.next_effect(), timeout=timeout))
            except asyncio.TimeoutError:
                pass
        effects.extend(vm.container.drain_effects())
        return {"effects": [_serialize_effect(e) for e in effects]}

    @app.get("/api/v1/products/{product_id}")
    async def get_product_detail(product_id: int):
        vm = ProductDetailViewModel(find_product)
        try:
            await vm.load_product(product_id)
            result = vm.state.product
        finally:
            await vm.aclose()

        if isinstance(result, Fail):
            if isinstance(result.error, ProductNotFoundError):
                raise HTTPException(status_code=404, detail=str(result.error))
            if isinstance(result.error, IntegrationResponseError):
                logger.error("Catalogue upstream failed for product %s: %s", product_id, result.error)
                raise HTTPException(status_code=502, detail=str(result.error))
            raise HTTPException(status_code=500, detail="Internal server error")
        return card_generator.render_product_detail(result)

    @app.websocket("/ws/products")
    async def products_stream(websocket: WebSocket):
        await websocket.accept()
        vm: ProductsViewModel = websocket.app.state.products_vm
        updates: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
        subscription = vm.container.observe_state(
            lambda result: updates.put_nowait(card_generator.render_products(result)),
            lambda s: s.products_response,
        )

        async def _pump() -> None:
            while True:
                await websocket.send_json(await updates.get())

        pump = asyncio.create_task(_pump())
        try:
            # Client messages are ignored; receiving detects the disconnect.
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("Products stream client disconnected")
        finally:
            pump.cancel()
            subscription.cancel()

    return app


app = create_app()
