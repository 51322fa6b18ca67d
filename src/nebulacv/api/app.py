from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from nebulacv.api.billing import router as billing_router
from nebulacv.api.records import router as records_router
from nebulacv.api.routes import router as api_router
from nebulacv.config import get_settings
from nebulacv.db.init import init_database
from nebulacv.errors import ErrorKind, NebulaError
from nebulacv.logging_config import configure_logging
from nebulacv.web.routes import router as web_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    static_dir = Path(__file__).resolve().parents[1] / "web" / "static"

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.exception_handler(NebulaError)
    async def _nebula_error(request: Request, exc: NebulaError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s %s", request.method, request.url.path, exc.kind.value, exc.message)
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid input')}" if location else "Invalid request body"
        return JSONResponse({"error": ErrorKind.MISSING_INPUT.value, "message": message}, status_code=400)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": ErrorKind.INTERNAL_ERROR.value}, status_code=500)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    app.include_router(records_router)
    app.include_router(billing_router)
    app.include_router(web_router)

    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    return app
