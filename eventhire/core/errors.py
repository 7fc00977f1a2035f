# eventhire/core/errors.py
"""
Typed failures raised by the booking, rating and identity services.

Every error carries the HTTP status and a stable ``code``; the handler
registered in ``main.py`` renders them as ``{"detail": ..., "code": ...}``
so routes never have to translate them.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    status_code = 400
    code = "marketplace_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransition(MarketplaceError):
    code = "invalid_transition"

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(f"Cannot change {entity} status from {current} to {requested}")
        self.entity = entity
        self.current = current
        self.requested = requested


class NotEligible(MarketplaceError):
    code = "not_eligible"


class DuplicateRating(MarketplaceError):
    status_code = 409
    code = "duplicate_rating"


class NotAuthorized(MarketplaceError):
    status_code = 403
    code = "not_authorized"


class AlreadyResponded(MarketplaceError):
    code = "already_responded"


class AlreadyReported(MarketplaceError):
    code = "already_reported"


class AlreadyApproved(MarketplaceError):
    code = "already_approved"


class NotFound(MarketplaceError):
    status_code = 404
    code = "not_found"


class NotAvailable(MarketplaceError):
    code = "not_available"


class InvalidRatingTarget(MarketplaceError):
    code = "invalid_rating_target"


class InvalidScore(MarketplaceError):
    code = "invalid_score"


class InvalidCredentials(MarketplaceError):
    status_code = 401
    code = "invalid_credentials"


class ConcurrentUpdate(MarketplaceError):
    status_code = 409
    code = "concurrent_update"


class AggregateRecomputeError(MarketplaceError):
    """The rating aggregate could not be written; safe to retry."""

    status_code = 503
    code = "aggregate_recompute_failed"


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )
