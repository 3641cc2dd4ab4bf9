"""Counter Gateway API — FastAPI application factory and entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map every failure to {"error": {"message", "details"?}}
    - CORS configured from AppConfig (not hardcoded)
    - One CounterGateway per app, built in the lifespan unless injected

Design Decisions:
    - create_app(gateway, config) factory: tests inject a stub gateway, uvicorn
      runs the factory (factory=True) so importing this module has no side effects
    - Lifespan closes the RPC client only when the app built the gateway itself
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from counter_gateway.api.error_handlers import register_error_handlers
from counter_gateway.api.middleware import register_middleware
from counter_gateway.api.routes import counter, health
from counter_gateway.config import AppConfig, get_config
from counter_gateway.infrastructure.observability import setup_logging
from counter_gateway.services.counter_gateway import CounterGateway

logger = logging.getLogger(__name__)

ENDPOINTS = (
    "GET  /health",
    "POST /api/counter/initialize",
    "POST /api/counter/increment",
    "GET  /api/counter/{counterAddress}",
)


def create_app(
    gateway: CounterGateway | None = None, config: AppConfig | None = None,
) -> FastAPI:
    """Build the FastAPI app. Config is resolved here only if neither argument carries one."""
    if config is None:
        config = gateway.config if gateway is not None else get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.log_level, config.log_format)
        owns_gateway = getattr(app.state, "gateway", None) is None
        if owns_gateway:
            app.state.gateway = CounterGateway(config)
        _log_startup(config, app.state.gateway)
        yield
        logger.info("Counter gateway shutting down")
        if owns_gateway:
            await app.state.gateway.close()

    app = FastAPI(title="Counter Gateway API", version="1.0.0", lifespan=lifespan)
    if gateway is not None:
        app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middleware(app)

    app.include_router(health.router)
    app.include_router(counter.router)

    register_error_handlers(app)
    return app


def _log_startup(config: AppConfig, gateway: CounterGateway) -> None:
    logger.info(
        f"Counter gateway listening on port {config.port}",
        extra={"cluster": config.solana_cluster_url, "program_id": config.program_id},
    )
    logger.info(f"Wallet: {gateway.get_wallet_public_key()}")
    logger.info("Available endpoints: " + ", ".join(ENDPOINTS))


def run() -> None:
    """Console entry point — serve the app on the configured port."""
    config = get_config()
    uvicorn.run(
        "counter_gateway.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=config.port,
    )


if __name__ == "__main__":
    run()
