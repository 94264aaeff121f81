"""FastAPI entrypoint for the warranty tracker."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .errors import NotFoundError, StorageFault, StoreError, ValidationError
from .logging_config import configure_logging
from .routers import products
from .schemas import ErrorResponse
from .store import ProductStore, build_store

logger = logging.getLogger(__name__)

HTTP_UNPROCESSABLE = 422

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: HTTP_UNPROCESSABLE,
    StorageFault: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_response(status_code: int, category: str, detail: str) -> JSONResponse:
    body = ErrorResponse(error=category, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(settings: Optional[Settings] = None, store: Optional[ProductStore] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    if store is None:
        store = build_store(settings)
    store.migrate()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        store.close()

    app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        if isinstance(exc, StorageFault):
            logger.error("Storage fault on %s %s", request.method, request.url.path)
        return _error_response(status_code, exc.category, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_request: Request, exc: RequestValidationError):
        messages = []
        for error in exc.errors():
            location = ".".join(str(item) for item in error["loc"] if item != "body")
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
        return _error_response(
            HTTP_UNPROCESSABLE,
            ValidationError.category,
            "; ".join(messages),
        )

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "ok", "environment": settings.environment, "store": settings.store_backend}

    app.include_router(products.router)

    logger.info("Application ready (store=%s)", settings.store_backend)
    return app


def serve() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    serve()
