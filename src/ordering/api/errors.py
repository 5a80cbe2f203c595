"""HTTP rendering of checkout errors.

Every CheckoutError is returned as ``{"error": {"code": ..., "message": ...}}``
with the status code of its category. Protean's own ValidationError and
ObjectNotFoundError are handled by ``protean.integrations.fastapi``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from shared.errors import (
    CartLineNotFound,
    CheckoutError,
    EmptyCart,
    InsufficientStock,
    OrderAccessDenied,
    OrderNotFound,
    PaymentFailure,
    PersistenceFailure,
    ProductNotFound,
)

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    ProductNotFound: 404,
    CartLineNotFound: 404,
    OrderNotFound: 404,
    OrderAccessDenied: 403,
    InsufficientStock: 409,
    EmptyCart: 400,
    PersistenceFailure: 503,
    PaymentFailure: 503,
}


def status_code_for(exc: CheckoutError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return 500


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, code=exc.code, error=exc.message)

    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()}, headers=headers)


def register_checkout_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutError, checkout_error_handler)
