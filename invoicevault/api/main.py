from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from ..core.logging import setup_logging
from ..core.config import settings
from ..services.auth import SESSION_COOKIE, verify_session_token
from ..services.errors import AuthError, InvoiceVaultError
from ..services.storage import close_mongo_pool
from .routers import auth, export, health, invoices

logger = setup_logging()

# Reachable without a session cookie
PUBLIC_PATHS = {"/login", "/api/login"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "InvoiceVault starting",
        backend=settings.storage_backend,
        login_required=settings.login_required,
        port=settings.port,
    )
    if settings.app_env == "prod":
        for name in settings.insecure_defaults():
            logger.warning(f"{name} is using its insecure default; set it in the environment")
    yield
    close_mongo_pool()


app = FastAPI(title="InvoiceVault", lifespan=lifespan)


@app.exception_handler(InvoiceVaultError)
async def invoicevault_error_handler(request: Request, exc: InvoiceVaultError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Invalid request body", "detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.middleware("http")
async def require_session(request: Request, call_next):
    """Gate every route except the login endpoints behind the session cookie"""
    path = request.url.path
    if settings.login_required and path not in PUBLIC_PATHS:
        try:
            verify_session_token(request.cookies.get(SESSION_COOKIE), settings)
        except AuthError as e:
            if path.startswith("/api/"):
                return JSONResponse(status_code=401, content={"error": e.message})
            return RedirectResponse("/login", status_code=303)
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


# CORS_ORIGINS can be set in .env as comma-separated list
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(invoices.router)
app.include_router(export.router)
app.include_router(auth.router)
