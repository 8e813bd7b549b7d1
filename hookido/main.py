"""
hookido - FastAPI Application

Standalone app factory for running hookido as its own service.
Applications that already have a FastAPI app call hookido.register() instead.
"""

import logging
from collections.abc import Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI

from hookido import __version__
from hookido.config import Settings, get_settings
from hookido.models.contracts.hookido import HookidoOptions
from hookido.plugin import get_registry, register

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Suppress noisy third-party loggers
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("aiobotocore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    hookido's own startup (subscription checks) is chained after this by
    register().
    """
    settings = get_settings()
    if settings.debug:
        logging.getLogger("hookido").setLevel(logging.DEBUG)

    logger.info(f"Starting hookido ({settings.environment})...")
    yield
    logger.info("Shutting down hookido...")


def create_app(
    options: HookidoOptions | Mapping[str, Any] | Sequence[HookidoOptions | Mapping[str, Any]] | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        options: hookido options to register (one entry or a list)
        settings: Optional settings override

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="hookido",
        description="SNS webhook receiver",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health():
        registry = get_registry(app)
        return {
            "status": "ok",
            "instances": len(registry.instances) if registry else 0,
        }

    if options is not None:
        register(app, options, settings=settings)

    return app
