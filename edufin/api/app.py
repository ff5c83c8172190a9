"""
EduFin REST API

    uvicorn --factory edufin.api.app:create_app --port 5000

or ``python -m edufin.api.app``, which reads the port from PORT.

Domain exceptions raised by the flows are mapped to HTTP statuses here,
in one place:
- NotFoundError → 404
- DuplicateError → 409
- AuthenticationError → 401
- InvalidQueryError → 400
- any other StorageError → 503
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edufin import __version__
from edufin.api.routes import auth, content, expenses, goals
from edufin.auth import AuthenticationError
from edufin.config import get_settings
from edufin.orchestrator import AppComponents, InvalidQueryError, create_app_components
from edufin.services.storage import DuplicateError, NotFoundError, StorageError


logger = structlog.get_logger("edufin.api")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message})


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, "Not found")

    @app.exception_handler(DuplicateError)
    async def duplicate(request: Request, exc: DuplicateError):
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(AuthenticationError)
    async def unauthenticated(request: Request, exc: AuthenticationError):
        return _error(status.HTTP_401_UNAUTHORIZED, str(exc))

    @app.exception_handler(InvalidQueryError)
    async def invalid_query(request: Request, exc: InvalidQueryError):
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(StorageError)
    async def storage_failed(request: Request, exc: StorageError):
        logger.error(
            "storage_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        audit = request.app.state.components.audit
        if audit is not None:
            await audit.log_error(
                error_type=type(exc).__name__,
                error_message=str(exc),
                details={"path": request.url.path, "method": request.method},
            )
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Storage unavailable")


def create_app(components: Optional[AppComponents] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        components: Flows to serve. Built from the environment when None;
                    tests pass in-memory components.
    """
    components = components or create_app_components()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if components.connection is not None:
            components.connection.close()

    app = FastAPI(title="EduFin API", version=__version__, lifespan=lifespan)
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=components.app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/api/health")
    def health():
        return {"ok": True}

    for router in (auth.router, content.router, goals.router, expenses.router):
        app.include_router(router, prefix="/api")

    return app


def main() -> None:
    settings = get_settings().app
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
