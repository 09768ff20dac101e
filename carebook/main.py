from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import logging

from .api.v1.appointments import router as appointments_router
from .api.v1.auth import router as auth_router
from .api.v1.doctors import router as doctors_router
from .api.v1.messages import router as messages_router
from .api.v1.patients import router as patients_router
from .api.v1.settings import router as settings_router
from .core.config import settings
from .core.errors import BookingAPIError
from .core.store import init_store

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Doctor directory, slot availability and appointment booking",
    openapi_url="/api/v1/openapi.json",
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

# Hosts are not checked under TESTING
if not settings.TESTING:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# Request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

@app.exception_handler(BookingAPIError)
async def booking_error_handler(request: Request, exc: BookingAPIError):
    if exc.status_code >= 500:
        logger.error(f"{exc.title}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    fields = [".".join(str(part) for part in error.get("loc", [])[1:]) for error in errors]
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation error",
            "message": f"Invalid or missing fields: {', '.join(f for f in fields if f) or 'request'}",
            "details": errors
        }
    )

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": "The requested resource was not found",
            "path": str(request.url.path)
        }
    )

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }
    )

app.include_router(auth_router, prefix="/api/v1")
app.include_router(doctors_router, prefix="/api/v1")
app.include_router(appointments_router, prefix="/api/v1")
app.include_router(patients_router, prefix="/api/v1")
app.include_router(messages_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")

@app.on_event("startup")
async def startup_event():
    """Seed the repository when demo data is enabled."""
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Token scheme: {settings.TOKEN_SCHEME}")

    init_store(seed=settings.SEED_DEMO_DATA)

    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown."""
    logger.info(f"Shutting down {settings.APP_NAME}...")

@app.get("/health")
async def health_check():
    """Liveness check reporting the running version."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }

@app.get("/")
async def root():
    """Links to the docs and the health check."""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health"
    }

@app.get("/api/v1/info")
async def api_info():
    """Route prefixes of the v1 API."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "authentication": "/api/v1/auth",
            "doctors": "/api/v1/doctors",
            "appointments": "/api/v1/appointments",
            "patients": "/api/v1/patients",
            "messages": "/api/v1/messages",
            "settings": "/api/v1/settings",
            "docs": "/docs",
            "openapi": "/api/v1/openapi.json"
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "carebook.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
