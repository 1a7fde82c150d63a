#!/usr/bin/env python3
"""
Fetch the product catalogue once through the products screen state holder
and print the rendered cards.

  python scripts/fetch_catalog.py                       # bundled mock catalogue
  python scripts/fetch_catalog.py --mode real --base-url https://example.com/api
  python scripts/fetch_catalog.py --product-id 2        # detail view for one product
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from catalog.core.async_result import Fail
from catalog.dependencies import build_fetch_products_use_case, build_find_product_use_case
from catalog.features.product_cards import ProductCardGenerator
from catalog.features.product_detail import ProductDetailViewModel
from catalog.features.products import ProductsViewModel
from catalog.utils.config_loader import load_catalog_config


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


async def run(args: argparse.Namespace) -> int:
    cfg = load_catalog_config(Path(args.config) if args.config else None)
    if args.mode:
        cfg.integrations.mode = args.mode
    if args.base_url:
        cfg.api.base_url = args.base_url

    cards = ProductCardGenerator()

    if args.product_id is not None:
        vm = ProductDetailViewModel(build_find_product_use_case(cfg))
        await vm.load_product(args.product_id)
        result = vm.state.product
        await vm.aclose()
        print(json.dumps(cards.render_product_detail(result), indent=2, ensure_ascii=False))
        return 1 if isinstance(result, Fail) else 0

    vm = ProductsViewModel(build_fetch_products_use_case(cfg))
    state = await vm.wait_until_loaded()
    await vm.aclose()
    print(json.dumps(cards.render_products(state.products_response), indent=2, ensure_ascii=False))
    return 1 if isinstance(state.products_response, Fail) else 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch and print the product catalogue")
    parser.add_argument("--config", default=None, help="Path to catalog_config.yml")
    parser.add_argument("--mode", choices=["mock", "real"], default=None, help="Override integrations mode")
    parser.add_argument("--base-url", default=None, help="Override catalogue API base URL")
    parser.add_argument("--product-id", type=int, default=None, help="Show the detail view for one product")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
