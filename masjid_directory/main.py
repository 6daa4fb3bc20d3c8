from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import httpx
import logging
import os
import uuid

from masjid_directory.core.config import settings
from masjid_directory.core.errors import DocumentValidationError, MasjidDirectoryError
from masjid_directory.logging import configure_logging
from masjid_directory.middleware.logging import LoggingMiddleware
from masjid_directory.models.dto import ErrorResponse
from masjid_directory.api.routes import router as api_router
from masjid_directory.api.pages import router as pages_router
from masjid_directory.services.auth_service import AuthService
from masjid_directory.services.masjid_service import MasjidService
from masjid_directory.services.repository import (
    InMemoryDocumentStore,
    MasjidRepository,
    RedisDocumentStore,
    UserRepository,
)

configure_logging()
logger = logging.getLogger(__name__)


def build_store():
    if settings.ENABLE_REDIS:
        logger.info("Using Redis document store")
        return RedisDocumentStore.from_url(settings.REDIS_URL)
    logger.warning("ENABLE_REDIS is off; documents are kept in process memory")
    return InMemoryDocumentStore()

# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application startup: v{settings.VERSION}")

    store = build_store()
    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
    app.state.store = store
    app.state.http_client = http_client
    app.state.masjid_service = MasjidService(MasjidRepository(store), http_client=http_client)
    app.state.auth_service = AuthService(UserRepository(store))

    yield

    logger.info("Application shutdown: Cleaning up resources.")
    await http_client.aclose()
    await store.close()

# --- FastAPI Application Initialization ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.BRIEF_DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)
if settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# --- Static Files ---
static_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "static"))
app.mount("/static", StaticFiles(directory=static_dir), name="static")

# --- Routes ---
app.include_router(api_router, prefix="/api")
app.include_router(pages_router)

# --- Health Check Endpoint ---
@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    store_ok = await request.app.state.store.ping()
    return {
        "status": "ok" if store_ok else "degraded",
        "store": "redis" if settings.ENABLE_REDIS else "memory",
    }

# --- Exception Handlers ---
@app.exception_handler(MasjidDirectoryError)
async def directory_error_handler(request: Request, exc: MasjidDirectoryError):
    body = ErrorResponse(error=exc.message)
    if isinstance(exc, DocumentValidationError):
        body.details = exc.details
        logger.info(f"Validation failed on {request.url.path}: {exc.details}")
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error="Validation failed", details=details).model_dump(exclude_none=True),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True)
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_id = str(uuid.uuid4())
    logger.error(f"Unhandled exception (ID: {error_id}): {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error", error_id=error_id).model_dump(exclude_none=True),
    )
