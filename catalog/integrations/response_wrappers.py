from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import ValidationError

from catalog.core.async_result import AsyncResult, Fail, Success
from catalog.integrations.contracts.products import ProductsResponse

T = TypeVar("T")


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class TransportError(IntegrationResponseError):
    """Non-2xx response or the upstream could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, payload=payload)
        self.status_code = status_code


class EmptyBodyError(IntegrationResponseError):
    """Successful response without a payload."""


class DeserializationError(IntegrationResponseError):
    """Payload did not match the catalogue contract."""


@dataclass(frozen=True)
class TransportResponse(Generic[T]):
    status_code: int
    reason: str = ""
    body: Optional[T] = None

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300


def safe_api_call(response: TransportResponse[T]) -> T:
    if not response.is_successful:
        raise TransportError(
            f"Error response: {response.status_code} {response.reason}".rstrip(),
            status_code=response.status_code,
        )
    if response.body is None:
        raise EmptyBodyError("Response body is null")
    return response.body


def to_async_result(response: TransportResponse[T]) -> AsyncResult[T]:
    try:
        return Success(safe_api_call(response))
    except IntegrationResponseError as exc:
        return Fail(exc)


def parse_products_response(raw: Any) -> ProductsResponse:
    if not isinstance(raw, dict):
        raise DeserializationError(
            f"Expected a JSON object for the catalogue, got {type(raw).__name__}.",
            payload={"raw": raw},
        )
    return _build_model(ProductsResponse, raw)


def _build_model(model_type, raw: Dict[str, Any]):
    try:
        return model_type.model_validate(raw)
    except ValidationError as exc:
        raise DeserializationError(f"Response validation failed: {exc}", payload=raw) from exc
