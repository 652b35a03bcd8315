from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from prometheus_fastapi_instrumentator import Instrumentator
from contextlib import asynccontextmanager
import logging
import os

from storefront.version import VERSION
from storefront.api.v1 import routes_auth, routes_orders, routes_products, routes_users
from storefront.api.deps import check_redis_health, get_dispatcher
from storefront.core.config import settings
from storefront.core.errors import StorefrontError
from storefront.core.limiting import limiter
from storefront.db.session import check_db_health, create_tables

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Storefront Service")
    create_tables()

    yield

    logger.info("Shutting down Storefront Service")
    get_dispatcher().shutdown()

app = FastAPI(
    title="Crystal Loom Storefront",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

# Metrics
Instrumentator().instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint="/metrics",
    should_gzip=True,
)

@app.get("/health")
def health():
    services = {"database": check_db_health()}
    if settings.OTP_BACKEND == "redis":
        services["redis"] = check_redis_health()
    status = "healthy" if all(services.values()) else "unhealthy"
    return {"status": status, "services": services}

@app.get("/api/health")
def api_health():
    return {"status": "ok"}

@app.get("/v1/_info")
def info():
    return {"service": "storefront", "version": VERSION}

app.include_router(routes_auth.router, prefix="/api", tags=["auth"])
app.include_router(routes_users.router, prefix="/api", tags=["users"])
app.include_router(routes_orders.router, prefix="/api", tags=["orders"])
app.include_router(routes_products.router, prefix="/api", tags=["products"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
