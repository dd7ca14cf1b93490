# Essential imports
import time
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from routers import (auth, products, cart, favorites, sales, orders, admin_orders,
                     notifications, ratings, analytics)
from contextlib import asynccontextmanager

# Import all models for SQLAlchemy relationship resolution
import models  # This triggers the imports in models/__init__.py

# Rate limiter imports
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from middleware.rate_limiter import limiter

# Logging imports
from core.logging_config import setup_logging, get_logger
from middleware import RequestIDMiddleware, get_request_id
from core.config import settings
from core.database import init_db, dispose_engine
from utils.logger import log_request
from fastapi.responses import JSONResponse

# CORS imports
from fastapi.middleware.cors import CORSMiddleware

# Initialize logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR
)

logger = get_logger(__name__)

# Lifecycle events logging
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Application startup complete", extra={"event": "startup", "env": settings.ENV})
    yield
    dispose_engine()
    logger.info("Application shutting down", extra={"event": "shutdown"})


app = FastAPI(
    title="EggMart API",
    description="Backend API for the EggMart eggs and chicks storefront",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,                    # the session lives in a cookie
    allow_methods=["*"],
    allow_headers=["*"],
)


# HTTP Request Logging Middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every HTTP request with method, path, status code, duration and
    client ip. The level follows the status class.
    """
    start_time = time.time()

    response = await call_next(request)

    duration = (time.time() - start_time) * 1000  # milliseconds
    client_ip = request.client.host if request.client else "unknown"

    log_request(
        logger,
        request.method,
        request.url.path,
        response.status_code,
        duration,
        extra={"client_ip": client_ip}
    )

    return response


# Add request ID middleware
app.add_middleware(RequestIDMiddleware)



# Health check
@app.get("/health")
async def health_check():
    logger.debug("Health check requested")
    return {"status": "Healthy"}


# Every error leaves the API as {"error": ..., "details"?: ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "error_count": len(exc.errors())}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid payload", "details": jsonable_encoder(exc.errors())}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch all unhandled exceptions, log them with stack trace and return
    a generic 500. The exception text is only echoed outside production.
    """
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "http_method": request.method,
            "error_type": type(exc).__name__,
            "req_id": get_request_id(request)
        },
        exc_info=True  # Include full stack trace
    )

    content = {"error": "Internal server error"}
    if settings.ENV != "production":
        content["details"] = str(exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content
    )



# Including routers
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(cart.router)
app.include_router(favorites.router)
app.include_router(sales.router)
app.include_router(orders.router)
app.include_router(admin_orders.router)
app.include_router(notifications.router)
app.include_router(ratings.router)
app.include_router(analytics.router)


# Add rate limiter to the app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
