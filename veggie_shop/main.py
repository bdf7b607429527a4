"""
FastAPI Application Entry Point - Veggie Shop
"""
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from veggie_shop.config import settings
from veggie_shop.database import init_db
from veggie_shop.logging_config import add_context, clear_context, configure_logging
from veggie_shop.api import catalog, orders, health, users

configure_logging()
logger = structlog.get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Veggie Shop",
    description="Vegetable delivery storefront: catalog browsing and order placement",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def bind_request_context(request: Request, call_next):
    """Tag every log record emitted while handling a request"""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_context()


# Include routers
app.include_router(health.router)
app.include_router(catalog.categories_router, prefix=settings.API_PREFIX)
app.include_router(catalog.vegetables_router, prefix=settings.API_PREFIX)
app.include_router(orders.router, prefix=settings.API_PREFIX)
app.include_router(users.router, prefix=settings.API_PREFIX)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    logger.info("Starting service", service=settings.SERVICE_NAME)
    init_db()
    logger.info(
        "Service is running",
        service=settings.SERVICE_NAME,
        port=settings.SERVICE_PORT,
        events_enabled=settings.EVENTS_ENABLED
    )


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down service", service=settings.SERVICE_NAME)
