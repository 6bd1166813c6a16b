"""
HTTP mapping of Questify exceptions.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse

from questify.exceptions import (
    QuestifyException,
    NotFoundException,
    DuplicateCompletionException,
    ValidationException,
    NotFriendsException,
    LedgerOperationException,
)

logger = logging.getLogger("questify.errors")

# Checked in order; subclasses before their parents
STATUS_BY_EXCEPTION = (
    (NotFoundException, status.HTTP_404_NOT_FOUND),
    (DuplicateCompletionException, status.HTTP_409_CONFLICT),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (NotFriendsException, status.HTTP_403_FORBIDDEN),
)


async def ledger_exception_handler(request: Request, exc: LedgerOperationException):
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE if exc.ambiguous
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    if exc.ambiguous:
        detail = f"{exc.operation} may or may not have been applied, please reload and retry"
    else:
        detail = f"{exc.operation} failed, nothing was changed"
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "ambiguous": exc.ambiguous},
    )


async def questify_exception_handler(request: Request, exc: QuestifyException):
    for exception_class, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exception_class):
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )
