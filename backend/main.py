import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import get_settings
from .logging_config import configure_logging
from .database import init_db
from .errors import VisitTrackerError
from .api.health import router as health_router
from .api.patients import router as patients_router

logger = logging.getLogger(__name__)


def _error_body(message: str, errors: list | None = None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(title="Hospital Visit Tracker", version="0.1.0")

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(VisitTrackerError)
    async def visit_tracker_error_handler(request: Request, exc: VisitTrackerError):
        if exc.status_code >= 500:
            logger.error("Request %s failed: %s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.errors))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content=_error_body("Invalid request data", errors))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content=_error_body("Internal server error"))

    @app.on_event("startup")
    def startup() -> None:
        init_db()

    app.include_router(health_router, prefix="/api")
    app.include_router(patients_router, prefix="/api")

    return app


app = create_app()
