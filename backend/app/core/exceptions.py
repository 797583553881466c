"""Domain errors raised by the billing services.

Every error carries the HTTP status it maps to so the API layer can render it
without knowing which service raised it.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BillingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "billing_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(BillingError):
    """Bad input shape, missing required value or unusable configuration."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation_error"


class NotFoundError(BillingError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"

    def __init__(self, resource: str, resource_id=None):
        detail = f"{resource} not found" if resource_id is None else f"{resource} {resource_id} not found"
        super().__init__(detail)
        self.resource = resource
        self.resource_id = resource_id


class StateConflictError(BillingError):
    """The operation is not valid for the entity's current status."""

    status_code = status.HTTP_409_CONFLICT
    kind = "state_conflict"


class OverpaymentError(ValidationError):
    kind = "overpayment"


async def billing_error_handler(request: Request, exc: BillingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": exc.kind})
