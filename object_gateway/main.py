"""
Object gateway: FastAPI app in front of the upstream objects API.
GET /login issues role tokens; /api/v1/objects routes are authenticated and forwarded upstream.
Default port 8089.
"""
import logging
import sys
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from object_gateway.config import Settings, load_settings
from object_gateway.envelope import send_response
from object_gateway.errors import AuthenticationError, ConfigurationError, GatewayError
from object_gateway.logging_config import configure_logging
from object_gateway.login import router as login_router
from object_gateway.objects import router as objects_router
from object_gateway.store import HttpObjectStore, ObjectStore

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(settings: Settings, store: ObjectStore | None = None) -> FastAPI:
    """Build the app around settings; store defaults to the HTTP adapter for settings.base_api_url."""
    if store is None:
        store = HttpObjectStore(settings.base_api_url, timeout=settings.request_timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("object gateway ready, upstream=%s", settings.base_api_url)
        yield
        app.state.store.close()
        logger.info("object gateway stopped")

    app = FastAPI(title="Object Gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000)
        level = logging.ERROR if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s %d %dms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(_, exc: GatewayError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return send_response(exc.status_code, exc.message, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_, exc: StarletteHTTPException):
        return send_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_, exc: RequestValidationError):
        logger.info("request validation failed: %s", exc.errors())
        return send_response(400, "invalid request parameters")

    app.include_router(login_router, tags=["login"])
    app.include_router(objects_router, prefix=API_PREFIX)

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return send_response(200, "ok", {"service": "object_gateway"})

    return app


def main() -> None:
    """Load .env and settings, then serve until SIGINT/SIGTERM."""
    import uvicorn

    load_dotenv()
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical("error loading environment variables: %s", e)
        sys.exit(1)

    configure_logging(settings)
    app = create_app(settings)

    logger.info("starting server at port: %d", settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=int(settings.request_timeout),
        timeout_graceful_shutdown=settings.shutdown_grace,
        log_config=None,
    )


if __name__ == "__main__":
    main()
