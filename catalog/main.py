# catalog/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse, PlainTextResponse
from contextlib import asynccontextmanager
import logging
import os
import time
import uuid
from typing import Callable

from .config import settings
from .api.v1 import api_router
from .api.deps import get_image_store
from .database import init_db, close_db, check_db_health
from .exceptions import CatalogError

# ============================================================
# Setup Logging
# ============================================================
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============================================================
# Startup/Shutdown
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Database and image store must come up or the process does not start.
    """
    logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.APP_VERSION} (debug={settings.DEBUG})")

    init_db()
    store = get_image_store()
    logger.info(f"📁 Image storage: {store.storage_type}")

    yield

    logger.info(f"🛑 Stopping {settings.APP_NAME}")
    store.close()
    # A later startup in this process builds a fresh store
    get_image_store.cache_clear()
    close_db()


# ============================================================
# Application
# ============================================================

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Multi-tenant catalog API: categories, products and movie listings",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# ============================================================
# Middleware
# ============================================================

origins = settings.allowed_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    # Browsers refuse credentialed responses to a wildcard origin
    allow_credentials="*" not in origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def request_context(request: Request, call_next: Callable):
    """Tag the request with an id and log it with its outcome and timing"""
    request_id = uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} "
        f"-> {response.status_code} ({elapsed_ms:.1f}ms)"
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ============================================================
# Routes
# ============================================================

if settings.STORAGE_TYPE == 'local':
    os.makedirs(settings.PHOTOS_DIR, exist_ok=True)
    app.mount("/photos", StaticFiles(directory=settings.PHOTOS_DIR), name="photos")

app.include_router(api_router)


@app.get("/", response_class=PlainTextResponse, tags=["Root"])
async def root() -> str:
    return "API funcionando"


@app.get("/health", tags=["Health"])
def health_check() -> dict:
    """Liveness plus database connectivity"""
    db_healthy = check_db_health()
    return {
        "status": "healthy" if db_healthy else "degraded",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "storage": settings.STORAGE_TYPE,
        "database": "connected" if db_healthy else "disconnected",
    }


# ============================================================
# Exception Handlers
# ============================================================

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    """Domain errors carry their own status and client message"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"[{_request_id(request)}] {type(exc).__name__} on "
        f"{request.method} {request.url.path}: {exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed path, query or body values"""
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    logger.warning(f"[{_request_id(request)}] Invalid request on {request.url.path}: {fields}")
    return JSONResponse(
        status_code=400,
        content={"message": "Datos inválidos", "fields": fields},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Internal details never reach the client"""
    request_id = _request_id(request)
    logger.error(f"❌ [{request_id}] Unhandled {type(exc).__name__}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Error interno del servidor", "request_id": request_id},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
