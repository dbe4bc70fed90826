from contextlib import asynccontextmanager
from typing import Annotated

from dishka import AsyncContainer, FromComponent
from dishka.integrations.fastapi import inject, setup_dishka
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin.router import router as admin_router
from analytics.router import router as analytics_router
from auth.router import router as auth_router
from chain.client import ChainClient
from chain.gateway import ContractGateway
from core.container import make_container
from core.environment.config import Settings
from core.exception_handler import register_exception_handlers
from core.logging.middleware import RequestLoggingMiddleware
from core.redis.providers import CacheService
from sale.router import router as sale_router
from whitelist.router import router as whitelist_router

SERVICE_NAME = "whitelist-token-backend"
VERSION = "1.0.0"

system_router = APIRouter(tags=["System"])


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()


def create_app(container: AsyncContainer | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    container : AsyncContainer | None
        Dependency container, built from the default providers when omitted
    settings : Settings | None
        Settings used for middleware setup

    Returns
    -------
    FastAPI
        Configured application
    """
    settings = settings or Settings()
    app = FastAPI(
        title="Whitelist Token Sale API",
        version=VERSION,
        description="Whitelist status, sale metadata and admin controls for an on-chain token sale",
        lifespan=lifespan
    )

    setup_dishka(container or make_container(), app)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Length", "Content-Type", "Authorization", "Accept", "X-Requested-With"],
        allow_credentials=True,
        max_age=12 * 3600
    )

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(whitelist_router)
    app.include_router(sale_router)
    app.include_router(analytics_router)
    app.include_router(admin_router)
    app.include_router(system_router)
    return app


@system_router.get("/")
async def root():
    """
    Root endpoint.

    Returns
    -------
    dict
        Application information
    """
    return {
        "name": SERVICE_NAME,
        "version": VERSION,
        "endpoints": {
            "whitelist_status": "/v1/whitelist/status/{address}",
            "sale_info": "/v1/sale/info",
            "purchase_events": "/v1/sale/events",
            "admin": "/v1/admin",
            "docs": "/docs"
        }
    }


@system_router.get("/health")
@inject
async def health(
    client: Annotated[ChainClient, FromComponent("chain")],
    gateway: Annotated[ContractGateway, FromComponent("chain")],
    cache: Annotated[CacheService, FromComponent("cache")]
):
    """
    Health check with node and cache connectivity.

    Returns
    -------
    dict
        Health status
    """
    chain_ok = await client.is_connected()
    cache_ok = await cache.ping()
    return {
        "status": "healthy" if chain_ok else "degraded",
        "service": SERVICE_NAME,
        "version": VERSION,
        "chain": chain_ok,
        "cache": cache_ok,
        "read_only": gateway.read_only
    }


@system_router.get("/metrics")
async def metrics():
    return {
        "status": "ok",
        "metrics": {
            "uptime": "placeholder",
            "requests": "placeholder"
        }
    }


app = create_app()
