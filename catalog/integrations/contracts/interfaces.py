from abc import ABC, abstractmethod

from .products import ProductsResponse
from ..response_wrappers import TransportResponse


# ---------------------------------------------------------------------------
# Abstract catalogue interfaces
# ---------------------------------------------------------------------------

class ProductRemoteDataSource(ABC):
    """Every catalogue source (real HTTP or local mock) must implement this interface."""

    @abstractmethod
    async def fetch_products(self) -> TransportResponse[ProductsResponse]:
        """Fetch the raw transport response for the catalogue."""


class ProductRepository(ABC):
    """Domain-facing access to the catalogue."""

    @abstractmethod
    async def fetch_products(self) -> ProductsResponse:
        """Return the catalogue or raise an IntegrationResponseError subclass."""
