# backend/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.logging_config import configure_logging
from config.settings import get_settings
from database.session import engine, init_db
from gateway.gateway_router import gateway_router
from services.errors import ServiceError

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Grocery API is starting…")
    try:
        init_db()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connected")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")

    if get_settings().has_cloudinary:
        logger.info("Cloudinary configured")
    else:
        logger.warning("Cloudinary not configured - product image upload disabled")

    yield
    # Shutdown
    logger.info("Shutting down…")


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        msg = str(err.get("msg", ""))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        field = ".".join(str(p) for p in err.get("loc", ())[1:])
        messages.append(f"{field}: {msg}" if field else msg)
    return ", ".join(messages) or "נתונים לא תקינים"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route Not Found - {request.url.path}"
        return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Unhandled storage error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Grocery Ordering API",
        description="הזמנת מצרכים: קטלוג, סל, הזמנות וניהול",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        status = {"status": "healthy", "service": "grocery-api", "version": APP_VERSION}
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            status["database"] = "connected"
        except SQLAlchemyError as e:
            status["database"] = f"error: {e.__class__.__name__}"
            status["status"] = "degraded"
        status["images"] = "configured" if settings.has_cloudinary else "not configured"
        return status

    @app.get("/")
    async def root():
        return {"message": "Grocery App Backend API is running...", "version": APP_VERSION, "docs": "/docs"}

    app.include_router(gateway_router, prefix="/api")

    return app


app = create_app()

if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5001")),
        reload=os.getenv("DEBUG", "False").lower() == "true",
        log_level=get_settings().log_level.lower(),
    )
