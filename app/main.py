from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.core.config import get_settings
from app.core.lifespan import lifespan
from app.api.v1.routers.products import router as products_router
from app.api.v1.routers.variations import router as variations_router
from app.api.v1.routers.health import router as health_router
from app.core.logging import configure_logging, resolve_level
from app.domain.errors import ProductsAPIError

from fastapi.middleware.cors import CORSMiddleware
import logging, os

settings = get_settings()
configure_logging(level=resolve_level(settings.LOG_LEVEL, debug=settings.DEBUG))
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://shop.example.com,https://admin.example.com"
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,                        # keep False for a simple preflight
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["content-type", "x-api-key", "x-session-id", "x-client-subdomain"],
    max_age=86400,
)


# ------- Errors -------
@app.exception_handler(ProductsAPIError)
async def products_api_error_handler(request: Request, exc: ProductsAPIError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, exc.error, exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body", "details": details},
    )


# ------- Routes -------
app.include_router(health_router)
app.include_router(products_router, prefix=settings.api_prefix)
app.include_router(variations_router, prefix=settings.api_prefix)
