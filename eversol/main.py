# eversol/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from eversol.core.config import get_settings
from eversol.core.errors import PincodeServiceError
from eversol.core.responses import http_exception_handler, pincode_error_handler
from eversol.storefront import get_registry

# Import models so SQLModel metadata is populated before create_all()
from eversol.models import stored_value as _stored_value_models  # noqa: F401

# Routers
from eversol.routers.wishlist import router as wishlist_router
from eversol.routers.addresses import router as addresses_router
from eversol.routers.pincode import router as pincode_router
from eversol.routers.products import router as products_router
from eversol.routers.cart import router as cart_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - STORAGE_BACKEND=sql: verify DB connectivity and create tables.
      - Build the storefront registry (storage backend + coupons).

    Shutdown:
      - No special cleanup needed.
    """
    if settings.STORAGE_BACKEND == "sql":
        from eversol.database import create_db_and_tables

        logger.info("🔄 Startup: Connecting to storefront database...")
        try:
            create_db_and_tables()
            logger.info("✅ Startup: DB connection OK, tables verified.")
        except Exception as e:
            logger.error(f"❌ Startup: DB connection FAILED: {e}")
            raise

    get_registry()
    logger.info(f"✅ Startup: storefront state backend = {settings.STORAGE_BACKEND}")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "Eversol Storefront API",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(PincodeServiceError, pincode_error_handler)

# Versioned API prefix, e.g. /api/v1
app.include_router(wishlist_router, prefix=settings.API_V1_STR)
app.include_router(addresses_router, prefix=settings.API_V1_STR)
app.include_router(pincode_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "eversol-storefront"}
