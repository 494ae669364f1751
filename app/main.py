"""
Chattable - FastAPI Backend Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import structlog

from app.config import settings
from app.database import SessionLocal
from app.exceptions import ChattableError
from app.api import auth, organizations, agent, menu, menu_categories, orders, dashboard, knowledge
from app.webhooks import elevenlabs
from app.tools import router as tools_router

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

renderer = (
    structlog.dev.ConsoleRenderer()
    if settings.log_format == "console"
    else structlog.processors.JSONRenderer()
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Chattable API", version="1.0.0")
    yield
    logger.info("Shutting down Chattable API")


# Create FastAPI application
app = FastAPI(
    title="Chattable",
    description="Voice ordering platform for restaurants",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(ChattableError)
async def domain_error_handler(request: Request, exc: ChattableError):
    """Domain errors carry their own status code"""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=exc.message,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Never leak stack traces to clients"""
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred"})


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
organization_prefix = "/organizations/{organization_id}"

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
app.include_router(agent.router, prefix=f"{organization_prefix}/agent", tags=["Voice Agent"])
app.include_router(menu_categories.router, prefix=f"{organization_prefix}/menu_categories", tags=["Menu"])
app.include_router(menu.router, prefix=f"{organization_prefix}/menu_items", tags=["Menu"])
app.include_router(orders.router, prefix=f"{organization_prefix}/orders", tags=["Orders"])
app.include_router(knowledge.router, prefix=f"{organization_prefix}/sources", tags=["Knowledge Base"])
app.include_router(dashboard.router, tags=["Dashboard"])

# Include webhook routers
app.include_router(elevenlabs.router, prefix="/webhook", tags=["Webhooks"])

# Include tools router
app.include_router(tools_router.router, prefix="/api", tags=["Tools"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
