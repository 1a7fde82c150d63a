"""
Generate product cards and screen views for the presentation layer
"""
from typing import Any, Callable, Dict, List, Optional

from catalog.core.async_result import AsyncResult, Fail, Loading, Success, Uninitialized
from catalog.error_handler import ErrorHandler
from catalog.integrations.contracts.products import Header, Product, ProductsResponse

FOOTER_TEXT = "© 2016 Best Company"
MAX_STARS = 5


class ProductCardGenerator:
    def __init__(self, error_handler: Optional[ErrorHandler] = None, max_stars: int = MAX_STARS):
        self.error_handler = error_handler or ErrorHandler()
        self.max_stars = max_stars

    def generate_card(self, product: Product, include_details: bool = False) -> Dict[str, Any]:
        """Generate product card"""
        card = {
            'product_id': product.id,
            'name': product.name,
            'type': product.type,
            'description': product.description,
            'release_date': product.release_date,
            'price': product.price.label(),
            'rating': product.rating,
            'stars': self._stars(product.rating),
            'available': product.available,
            'image_url': product.image_url,
            'color': {'name': product.color, 'code': product.color_code},
            'actions': [
                {'type': 'select_product', 'label': 'Details', 'product_id': product.id},
            ],
        }

        if include_details:
            card['long_description'] = product.long_description

        return card

    def generate_catalogue_view(self, catalogue: ProductsResponse) -> Dict[str, Any]:
        return {
            'header': self._header(catalogue.header),
            'filters': list(catalogue.filters),
            'cards': [self.generate_card(p) for p in catalogue.products],
            'footer': FOOTER_TEXT,
        }

    def render_products(self, result: AsyncResult[ProductsResponse]) -> Dict[str, Any]:
        return self.render_result(result, self.generate_catalogue_view)

    def render_product_detail(self, result: AsyncResult[Product]) -> Dict[str, Any]:
        return self.render_result(result, lambda p: self.generate_card(p, include_details=True))

    def render_result(self, result: AsyncResult[Any], render_value: Callable[[Any], Dict[str, Any]]) -> Dict[str, Any]:
        """Serialize any AsyncResult into {status, data, error}."""
        value = result.current_value()
        view: Dict[str, Any] = {
            'status': self._status(result),
            'data': render_value(value) if value is not None else None,
            'error': None,
        }
        if isinstance(result, Fail):
            view['error'] = self.error_handler.handle_exception(result.error)
        return view

    @staticmethod
    def _status(result: AsyncResult[Any]) -> str:
        if isinstance(result, Success):
            return 'success'
        if isinstance(result, Loading):
            return 'loading'
        if isinstance(result, Fail):
            return 'fail'
        if isinstance(result, Uninitialized):
            return 'uninitialized'
        raise TypeError(f"Unknown AsyncResult variant: {result!r}")

    @staticmethod
    def _header(header: Header) -> Dict[str, str]:
        return {'title': header.header_title, 'description': header.header_description}

    def _stars(self, rating: float) -> List[bool]:
        # Star i is lit when i <= rating, so 4.5 lights four stars.
        return [i <= rating for i in range(1, self.max_stars + 1)]
