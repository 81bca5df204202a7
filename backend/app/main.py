from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from app.core.config import settings
from app.core.logging import setup_logging
from app.core.exceptions import (
    GuardianPawsError,
    domain_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.services.rescue_core import RescueCore

# Setup Logging
setup_logging()
logger = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Builds the rescue core once per process (unless one was injected),
    loads it, and flushes it on shutdown.
    """
    core = getattr(app.state, "core", None)
    if core is None:
        core = await RescueCore.from_database_url(settings.DATABASE_URL)
        app.state.core = core
    await core.startup()
    logger.info("startup", project=settings.PROJECT_NAME)
    yield
    await core.shutdown()
    app.state.core = None
    logger.info("shutdown")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Coordination backend between injured-animal reporters and rescue NGOs",
    lifespan=lifespan,
    docs_url=f"{settings.API_V1_STR}/docs",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception Handlers
app.add_exception_handler(GuardianPawsError, domain_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Health Check
@app.get("/health", tags=["system"])
async def health_check():
    """
    Public health check endpoint for load balancers.
    """
    return {"status": "ok", "environment": settings.ENVIRONMENT}


from app.api.v1.public import accounts as public_accounts, reporting as public_reporting
from app.api.v1.admin import reports as admin_reports

app.include_router(public_accounts.router, prefix=f"{settings.API_V1_STR}/auth", tags=["accounts"])
app.include_router(public_reporting.router, prefix=f"{settings.API_V1_STR}/reports", tags=["reporting"])
app.include_router(admin_reports.router, prefix=f"{settings.API_V1_STR}/admin/reports", tags=["ngo-reports"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
