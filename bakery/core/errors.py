# =========================================================
# DOMAIN ERRORS
#
# Raised by the service layer, mapped to HTTP responses by
# the handler registered in bakery/main.py
# =========================================================

from fastapi import Request, status
from fastapi.responses import JSONResponse


class BakeryError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "bad_request"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(BakeryError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class InvalidInputError(BakeryError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "invalid_input"


class InsufficientStockError(BakeryError):
    status_code = status.HTTP_409_CONFLICT
    kind = "insufficient_stock"

    def __init__(self, item_name: str, available, needed, unit: str = ""):
        self.item_name = item_name
        self.available = available
        self.needed = needed
        self.unit = unit
        suffix = f" {unit}" if unit else ""
        super().__init__(
            f"Insufficient stock for '{item_name}': need {needed}{suffix}, have {available}{suffix}"
        )


class ConcurrencyConflictError(BakeryError):
    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"


async def bakery_error_handler(request: Request, exc: BakeryError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )
