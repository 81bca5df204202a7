from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

logger = structlog.get_logger()


class GuardianPawsError(Exception):
    """
    Base class for recoverable domain errors.
    The caller shows `message` and keeps its previous state.
    """
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(GuardianPawsError):
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateAccountError(GuardianPawsError):
    status_code = status.HTTP_409_CONFLICT


class InvalidTransitionError(GuardianPawsError):
    status_code = status.HTTP_409_CONFLICT


class NotAuthorizedError(GuardianPawsError):
    status_code = status.HTTP_403_FORBIDDEN


class EmptyMessageError(GuardianPawsError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


async def domain_exception_handler(request: Request, exc: GuardianPawsError):
    """
    Maps domain errors to their HTTP status.
    """
    logger.info(
        "domain_error",
        error=type(exc).__name__,
        detail=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )

async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all for unhandled exceptions.
    Prevents stack trace leakage in production.
    """
    logger.error("unhandled_exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred. Please try again."},
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Standard HTTP exception handler.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Pydantic validation error handler.
    """
    logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Validation error", "errors": jsonable_errors(exc)},
    )

def jsonable_errors(exc: RequestValidationError):
    # ctx may hold exception instances that JSONResponse cannot encode
    return [
        {k: v for k, v in err.items() if k != "ctx"}
        for err in exc.errors()
    ]
