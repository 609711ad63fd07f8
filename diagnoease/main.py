import time

from fastapi import FastAPI, Request, status, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from diagnoease.config import get_settings
from diagnoease.database import close_db, init_db, ping_db
from diagnoease.utils.logger import get_logger
from diagnoease.rate_limit import limiter

logger = get_logger("main")
settings = get_settings()

# Routers
from diagnoease.routers import auth as auth_router
from diagnoease.routers import users as users_router
from diagnoease.routers import lab_tests as lab_tests_router
from diagnoease.routers import appointments as appointments_router
from diagnoease.routers import banners as banners_router
from diagnoease.routers import reports as reports_router
from diagnoease.routers import lookups as lookups_router
from diagnoease.routers import payments as payments_router

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
]

app = FastAPI(
    title="DiagnoEase API",
    version="1.0.0",
    debug=settings.APP_DEBUG,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def custom_openapi():
    """Expose the bearer scheme so Swagger's Authorize button accepts a raw token."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        routes=app.routes,
    )

    components = openapi_schema.setdefault("components", {})
    security_schemes = components.setdefault("securitySchemes", {})
    security_schemes["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }

    # Only routes guarded by the Auth Guard already carry a security entry
    for path in openapi_schema.get("paths", {}):
        for method in openapi_schema["paths"][path]:
            operation = openapi_schema["paths"][path][method]
            if operation.get("security"):
                operation["security"] = [{"BearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or DEFAULT_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(lookups_router.router)
app.include_router(users_router.router)
app.include_router(lab_tests_router.router)
app.include_router(appointments_router.router)
app.include_router(reports_router.router)
app.include_router(banners_router.router)
app.include_router(payments_router.router)


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "status_code": exc.status_code},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()} - Path: {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors()), "status_code": 422},
    )


@app.exception_handler(PyMongoError)
async def store_exception_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error", "status_code": 500},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "status_code": 500},
    )


# Middleware Logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.3f}s"
    )
    return response


@app.get("/")
async def root():
    return {"message": "DiagnoEase server is running"}


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/readyz")
async def readyz():
    if not await ping_db():
        raise HTTPException(status_code=503, detail="Database not ready")
    return {"status": "ok", "database": "up"}


@app.on_event("startup")
async def on_startup():
    print("=" * 60)
    print(f"🚀 [STARTUP] {settings.APP_NAME} ({settings.APP_ENV})")
    print(f"   📖 Swagger UI: http://localhost:8000/docs")
    print("=" * 60)
    logger.info("Starting application...")
    await init_db()
    logger.info("Database initialized")
    if not settings.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY is not set; /create-payment-intent will return 503")


@app.on_event("shutdown")
async def on_shutdown():
    close_db()
    logger.info("Shutting down application...")
