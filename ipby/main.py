# IPby - Standalone Server Entry Point
"""
FastAPI application exposing the client IP service.

Every GET path is handed to the transport-independent core; this module
only marshals the Starlette request into a RequestView and the
ResponseView back into a Starlette response.
"""

import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response

from ipby.config import VERSION, config
from ipby.core import RequestView, handle
from ipby.middleware.access_log import AccessLogMiddleware

logger = logging.getLogger(__name__)


BANNER = r"""
   _______  __
  /  _/ _ \/ /  __ __
 _/ // ___/ _ \/ // /
/___/_/  /_.__/\_, /
              /___/
    IPby API v{version}
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting server")
    trusted = sorted(app.state.trusted_proxies)
    logger.info("Trusted proxies: %s", ", ".join(trusted) if trusted else "none")
    if app.state.cors_allow_origin:
        logger.info("CORS enabled for origin %s", app.state.cors_allow_origin)

    yield

    # Shutdown
    logger.info("Shutting down")


def request_view(request: Request) -> RequestView:
    """
    Build a RequestView from a Starlette request.

    Repeated X-Forwarded-For lines are joined into one chain, in arrival
    order. The TCP peer address stands in for the source-ip header when
    the request does not carry a non-empty one.
    """
    headers = dict(request.headers)
    forwarded_for = request.headers.getlist("x-forwarded-for")
    if forwarded_for:
        headers["x-forwarded-for"] = ", ".join(forwarded_for)
    if not headers.get("source-ip") and request.client:
        headers["source-ip"] = request.client.host
    return RequestView(
        path=request.url.path,
        headers=headers,
        query=dict(request.query_params),
    )


def create_app(
    trusted_proxies: Optional[Iterable[str]] = None,
    cors_allow_origin: Optional[str] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        trusted_proxies: Overrides config.TRUSTED_PROXIES
        cors_allow_origin: Overrides config.CORS_ALLOW_ORIGIN

    Returns:
        Configured FastAPI app
    """
    # Docs routes would shadow /docs etc.; every path belongs to the core
    app = FastAPI(
        title="IPby",
        description="Returns the caller's public IP address in several formats",
        version=VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.trusted_proxies = frozenset(
        config.TRUSTED_PROXIES if trusted_proxies is None else trusted_proxies
    )
    app.state.cors_allow_origin = (
        config.CORS_ALLOW_ORIGIN if cors_allow_origin is None else cors_allow_origin
    )

    app.add_middleware(AccessLogMiddleware)

    @app.get("/{path:path}")
    async def client_ip(request: Request) -> Response:
        """
        Catch-all endpoint; routing happens in the core.
        """
        result = handle(
            request_view(request),
            trusted_proxies=app.state.trusted_proxies,
            cors_allow_origin=app.state.cors_allow_origin,
        )
        # Content-Type is passed as a header so Starlette does not add a charset
        return Response(
            content=result.body,
            status_code=result.status_code,
            headers=result.headers,
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> Response:
        """
        Handle internal server errors.
        """
        logger.exception("Unhandled error for %s %s", request.method, request.url.path)
        return Response(
            content="Internal Server Error",
            status_code=500,
            headers={"Content-Type": "text/plain"},
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from ipby.config import configure_logging

    configure_logging()
    print(BANNER.format(version=VERSION))
    uvicorn.run(
        "ipby.main:app",
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )
