"""
Peregrinus API - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, Response
import time
import logging

# Prometheus metrics
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST, REGISTRY

from app.config import settings
from app.routers import cron, flights, health, notifications, tracking, users
from app.utils.database import init_db, close_db
from app.utils.redis import init_redis, close_redis

REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint']
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager - handles startup and shutdown events
    """
    logger.info("Starting Peregrinus API...")

    await init_db()
    await init_redis()

    logger.info(f"Peregrinus API ready, prices checked every {settings.PRICE_CHECK_INTERVAL_MINUTES} minutes")

    yield

    logger.info("Shutting down Peregrinus API...")

    await close_db()
    await close_redis()

    logger.info("Cleanup completed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Peregrinus API",
        description="""
        ## Flight Price Tracking API

        Peregrinus watches flight prices for you and tells you when to book.

        ### Features
        - 🔍 Search current fares across Ryanair, EasyJet and WizzAir
        - ✈️ Track a route or a specific flight against a target price
        - 🔔 In-app and email alerts on price drops and rises

        ### Authentication
        This API uses JWT Bearer tokens for authentication.
        Include the token in the Authorization header: `Bearer <token>`
        """,
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request timing middleware with Prometheus metrics
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        if request.url.path != "/metrics":
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)
            REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=response.status_code).inc()
            REQUEST_LATENCY.labels(method=request.method, endpoint=endpoint).observe(process_time)

        response.headers["X-Process-Time"] = str(process_time)
        return response

    app.include_router(health.router, tags=["Health"])
    app.include_router(flights.router, prefix="/flights", tags=["Flights"])
    app.include_router(tracking.router, prefix="/tracking", tags=["Tracking"])
    app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(cron.router, prefix="/cron", tags=["Cron"])

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - API information"""
        return {
            "name": "Peregrinus API",
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs" if settings.DEBUG else "disabled",
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint"""
        return Response(
            content=generate_latest(REGISTRY),
            media_type=CONTENT_TYPE_LATEST
        )

    return app


app = create_app()
