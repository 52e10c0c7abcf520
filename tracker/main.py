"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tracker.config import settings
from tracker.middleware.error_handler import ErrorHandlerMiddleware
from tracker.middleware.rate_limit import limiter
from tracker.api.v1.routers import drivers, hierarchy, network

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Supabase project: {settings.supabase_url}")
    logger.info(f"Graph sizing: base={settings.graph_base_size}, "
                f"range=[{settings.graph_min_size}, {settings.graph_max_size}]")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from tracker.infrastructure.supabase_client import get_supabase_client
    logger.info("Shutting down application...")
    client = get_supabase_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Campaign tracking API for fertilizer distribution

    Reads regional allocations and truck deliveries from the campaign
    database and serves them as roll-up views.

    ## Features

    - **Hierarchy**: Region -> Department -> Commune -> Operator ->
      Allocation -> Delivery with tonnage totals at every level
    - **Global view**: drill-down columns with cascade-clearing selection
    - **Driver performance**: drivers ranked by loaded tonnage
    - **Network graph**: node/edge projection with tonnage-proportional sizing
    - **Robust Error Handling**: retries with exponential backoff on
      database calls
    - **Rate Limiting**: Protects the API from abuse

    ## Roll-up rules

    - Totals (`total_target`, `total_delivered`) sum every allocation beneath
      a node
    - `count` is the number of immediate children
    - Completion is `delivered / target * 100`, and 0 when the target is 0
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(hierarchy.router, prefix="/api/v1")
app.include_router(drivers.router, prefix="/api/v1")
app.include_router(network.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
