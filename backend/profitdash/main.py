"""FastAPI application entrypoint.

Configures CORS, error rendering and routers, and logs the provider
configuration check on startup.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from .deps import get_settings
from .routers import health as health_router
from .routers import profit_data as profit_data_router
from .telemetry import init_observability


def create_app() -> FastAPI:
    init_observability()

    app = FastAPI(
        title="Daily Profit API",
        description="""
        Backend for the daily profit dashboard.

        For a selected calendar day this API aggregates:
        - Paid orders and revenue from Shopify
        - Ad spend from Meta and TikTok

        Profit is derived from those figures and user-editable cost
        assumptions (COGS, shipping, monthly fixed costs) that live in the
        dashboard session and are never stored.
        """,
        version="1.0.0",
    )

    settings = get_settings()

    logger.info(f"[CORS] Allowed origins: {settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Error bodies use {"error": ...}, which is what the dashboard reads
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[API] Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(health_router.router)
    app.include_router(profit_data_router.router)

    @app.on_event("startup")
    async def startup_event():
        """Report provider configuration once; never blocks startup."""
        report = health_router.check_provider_configuration(get_settings())
        for provider in report.providers:
            if provider.configured:
                logger.info(f"[STARTUP] {provider.provider}: configured")
            elif provider.required:
                logger.error(f"[STARTUP] {provider.provider}: NOT configured ({', '.join(provider.missing)})")
            else:
                logger.warning(
                    f"[STARTUP] {provider.provider}: not configured ({', '.join(provider.missing)}) "
                    f"- spend will be reported as 0"
                )

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Field locations and messages only; submitted values are not echoed back."""
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]


app = create_app()
