"""
Where: endpoints_emulator/gateway/lifecycle.py
What: Gateway startup/shutdown orchestration for shared resources.
Why: Keep main.py focused on app assembly while preserving lifecycle behavior.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from endpoints_emulator.common.core.http_client import HttpClientFactory

from .config import GatewayConfig
from .core.cors import CorsPolicy
from .core.error_info import StatusCodeMapping
from .services.spi_dispatcher import SpiDispatcher

logger = logging.getLogger("gateway.main")


@asynccontextmanager
async def manage_lifespan(app: FastAPI, gateway_config: GatewayConfig) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    factory = HttpClientFactory(gateway_config)
    client = factory.create_async_client(timeout=gateway_config.BACKEND_TIMEOUT)

    # Built once; handlers only ever read them.
    cors_policy = CorsPolicy()
    status_mapping = StatusCodeMapping()

    try:
        app.state.http_client = client
        app.state.cors_policy = cors_policy
        app.state.status_mapping = status_mapping
        app.state.spi_dispatcher = SpiDispatcher(
            client=client,
            backend_url=gateway_config.BACKEND_URL,
            spi_prefix=gateway_config.SPI_PATH_PREFIX,
            status_mapping=status_mapping,
        )

        logger.info(
            "Gateway initialized",
            extra={
                "backend_url": gateway_config.BACKEND_URL,
                "api_prefix": gateway_config.API_PATH_PREFIX,
            },
        )
        yield
    finally:
        logger.info("Gateway shutting down, closing http client.")
        await client.aclose()
