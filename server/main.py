"""Entry point for the PyShare server."""

import time
import uuid
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from common.exceptions import (
    EmptyManifestError,
    InvalidFileNameError,
    InvalidPeerAddressError,
    NetworkFailureError,
    NotFoundError,
    PyShareError,
    SharingInactiveError,
    StorageIOError,
)
from common.logging_config import setup_logging
from common.types import ConnectionLogEntry
from server import config
from server.connection_log import is_tracked_path
from server.context import AppContext, create_context
from server.routes import api_router, content_router, file_router

logger = setup_logging('server')
setup_logging('remote')


def _client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _error_response(status_code: int, exc: Exception, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": code})


def register_middleware(app: FastAPI) -> None:

    @app.middleware("http")
    async def track_connections(request: Request, call_next):
        """
        Record requests to tracked paths in the connection log.
        """
        if is_tracked_path(request.url.path):
            request.app.state.context.connection_log.record(ConnectionLogEntry(
                ip=_client_address(request),
                path=request.url.path,
                method=request.method,
                timestamp=datetime.now(timezone.utc),
                user_agent=request.headers.get("user-agent", "Unknown"),
            ))
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path} "
            f"[request_id={request_id}] [client={_client_address(request)}]"
        )

        response = await call_next(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(EmptyManifestError)
    async def empty_manifest_handler(request: Request, exc: EmptyManifestError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Empty manifest error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return _error_response(status.HTTP_404_NOT_FOUND, exc, "EMPTY_MANIFEST")

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"File not found error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return _error_response(status.HTTP_404_NOT_FOUND, exc, "FILE_NOT_FOUND")

    @app.exception_handler(InvalidFileNameError)
    async def invalid_file_name_handler(request: Request, exc: InvalidFileNameError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Invalid file name error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, exc, "INVALID_FILE_NAME")

    @app.exception_handler(SharingInactiveError)
    async def sharing_inactive_handler(request: Request, exc: SharingInactiveError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.info(
            f"Refused file request while sharing inactive [request_id={request_id}] path={request.url.path}"
        )
        return PlainTextResponse(str(exc), status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    @app.exception_handler(StorageIOError)
    async def storage_io_handler(request: Request, exc: StorageIOError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"Storage IO error: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=True
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, "IO_FAILURE")

    @app.exception_handler(InvalidPeerAddressError)
    async def invalid_peer_address_handler(request: Request, exc: InvalidPeerAddressError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Invalid peer address: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, exc, "INVALID_PEER_ADDRESS")

    @app.exception_handler(NetworkFailureError)
    async def network_failure_handler(request: Request, exc: NetworkFailureError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Peer network failure: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc, "NETWORK_FAILURE")

    @app.exception_handler(PyShareError)
    async def pyshare_exception_handler(request: Request, exc: PyShareError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"PyShare exception: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=True
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, "INTERNAL_ERROR")


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the FastAPI application around a server context.

    Args:
        context: State to serve; a fresh inactive context over the
            configured shared folder is created if omitted

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="PyShare",
        description="Local network file sharing server",
        version="1.0.0"
    )
    app.state.context = context or create_context(config.SHARED_DIR, config.LOG_CAPACITY)

    register_middleware(app)
    register_exception_handlers(app)

    app.include_router(api_router)
    app.include_router(file_router)
    app.include_router(content_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "PyShare Server API", "status": "running"}

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.
        Returns 200 if service is alive.
        """
        return {"status": "healthy", "service": "pyshare"}

    return app


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    logger.info(f"PyShare server starting, shared folder: {config.SHARED_DIR}")
    uvicorn.run(
        "server.main:create_app",
        factory=True,
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
        reload=config.SERVER_RELOAD
    )


if __name__ == "__main__":
    main()
