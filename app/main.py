"""
Main FastAPI application
Semester, enrollment, progress and assessment service for the LMS
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import logging
import time

from app.config import settings
from app.database import SessionLocal, init_db
from app.exceptions import LMSError
from app.api import enrollments, progress, quizzes, assignments
from app.utils.cache import cache_service
from app.utils.rate_limiter import rate_limiter

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

UNLIMITED_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Semester tracking, enrollment, content progress and quiz/assignment grading",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def throttle_and_log(request: Request, call_next):
    """Rate limit, then time the request and log its outcome"""
    if request.url.path not in UNLIMITED_PATHS:
        try:
            rate_limiter.check_rate_limit(request)
        except LMSError as e:
            logger.info(f"{request.method} {request.url.path} - throttled")
            return JSONResponse(status_code=e.status_code, content=e.to_dict())
    
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    
    response.headers["X-Process-Time"] = f"{elapsed:.3f}"
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {elapsed:.3f}s"
    )
    return response


@app.exception_handler(LMSError)
async def lms_error_handler(request: Request, exc: LMSError):
    """Service errors carry their own status code and body"""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP_ERROR",
            "message": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
            "status_code": 500,
            "detail": str(exc) if settings.DEBUG else None
        }
    )


@app.get("/health")
async def health_check():
    """
    Liveness plus dependency status
    
    The database is required; the cache is optional, so a missing Redis
    only shows up as cache="disabled".
    """
    database = "ok"
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database failure: {str(e)}")
        database = "unavailable"
    finally:
        db.close()
    
    return {
        "status": "healthy" if database == "ok" else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": database,
        "cache": "enabled" if cache_service.enabled else "disabled",
        "timestamp": time.time()
    }


@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


for module in (enrollments, progress, quizzes, assignments):
    app.include_router(module.router)


@app.on_event("startup")
async def startup_event():
    """Create missing tables"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise
    logger.info("Database initialized successfully")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
