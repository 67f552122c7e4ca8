"""
TeraRelay API - Main Application
FastAPI relay that resolves 1024terabox share links through an external API
"""
import os
import logging
import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Config
from endpoints import health_router, resolve_router, ResolveFailedError
from endpoints.health import API_VERSION

# ---------- Logging Setup ----------
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(Config.LOG_FILE) if os.access(".", os.W_OK) else logging.NullHandler()
    ]
)
logger = logging.getLogger("terarelay-api")

# ---------- Lifespan Management ----------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting TeraRelay API...")
    logger.info(f"Resolver API: {Config.RESOLVER_API_URL} (timeout {Config.RESOLVER_TIMEOUT:g}s)")
    logger.info(f"Allowed domains: {', '.join(Config.ALLOWED_DOMAINS)}")
    yield
    logger.info("Shutting down TeraRelay API...")

# ---------- FastAPI App ----------
app = FastAPI(
    title="TeraRelay API",
    version=API_VERSION,
    description="Resolves 1024terabox share links to file metadata and direct download links",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ---------- Middleware ----------
app.add_middleware(GZipMiddleware, minimum_size=1000)

if Config.ENABLE_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials="*" not in Config.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url}")

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(f"Response: {response.status_code} - {process_time:.3f}s")
        response.headers["X-Process-Time"] = str(process_time)

        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"Request failed: {str(e)} - {process_time:.3f}s")
        logger.error(f"Traceback: {traceback.format_exc()}")
        raise

# ---------- Exception Handlers ----------
@app.exception_handler(ResolveFailedError)
async def resolve_failed_handler(request: Request, exc: ResolveFailedError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"status": "error", "message": exc.message}
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "status": "error",
            "message": "Invalid request body",
            "errors": jsonable_encoder(exc.errors())
        }
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception from {request.url}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "message": "An unexpected error occurred"}
    )

# ---------- Include Routers ----------
app.include_router(health_router, prefix="/api", tags=["System info"])
app.include_router(resolve_router, prefix="/api", tags=["Terabox"])

# Static frontend goes last so it never shadows the API routes
if os.path.isdir(Config.STATIC_DIR):
    app.mount("/", StaticFiles(directory=Config.STATIC_DIR, html=True), name="static")
else:
    logger.info(f"Static directory '{Config.STATIC_DIR}' not found, skipping static files")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        log_level=Config.LOG_LEVEL.lower(),
        access_log=True,
        reload=False
    )
