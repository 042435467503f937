import time
import uuid
from typing import Callable

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from price_aggregator.api.dependencies import build_price_aggregator
from price_aggregator.api.error_handlers import register_exception_handlers
from price_aggregator.core.config import get_settings, load_env_file
from price_aggregator.core.logging import configure_logging, get_logger, set_correlation_id
from price_aggregator.infrastructure.auth.oauth import TokenStore


# Load environment variables and configure logging early
load_env_file()
configure_logging()
logger = get_logger(__name__)


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url=f"{settings.API_PREFIX}/docs",
        debug=settings.DEBUG
    )

    configure_middleware(app)
    register_exception_handlers(app)
    register_routers(app)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting up Grocery Price Aggregator")
        app.state.http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        app.state.token_store = TokenStore()
        app.state.price_aggregator = build_price_aggregator(
            settings,
            app.state.http_client,
            token_store=app.state.token_store
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down Grocery Price Aggregator")
        http_client = getattr(app.state, "http_client", None)
        if http_client is not None:
            await http_client.aclose()

    return app


def configure_middleware(app: FastAPI) -> None:
    """
    Configure middleware components for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable):
        correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {str(e)}",
                extra={"data": {
                    "request_path": request.url.path,
                    "method": request.method,
                    "process_time_ms": round(process_time * 1000, 2),
                }},
                exc_info=True
            )
            raise

        response.headers["X-Correlation-ID"] = correlation_id
        process_time = time.time() - start_time
        logger.info(
            "Request completed",
            extra={"data": {
                "request_path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            }}
        )
        return response


def register_routers(app: FastAPI) -> None:
    """
    Register API routers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    # Import routers here to avoid circular imports
    from price_aggregator.api.routes.health import get_health, health_router, HealthStatus
    from price_aggregator.api.routes.prices import prices_router

    app.add_api_route("/", get_health, methods=["GET"], response_model=HealthStatus, tags=["Health"])
    app.include_router(health_router, prefix=f"{settings.API_PREFIX}/health", tags=["Health"])
    app.include_router(prices_router, prefix=settings.API_PREFIX, tags=["Prices"])


app = create_application()


def run() -> None:
    import uvicorn

    uvicorn.run("price_aggregator.main:app", host="0.0.0.0", port=get_settings().PORT)


if __name__ == "__main__":
    run()
