"""
Gateway configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from pydantic import Field
from endpoints_emulator.common.core.config import BaseAppConfig


class GatewayConfig(BaseAppConfig):
    """
    Configuration management for the dev gateway.
    """

    # Server settings
    UVICORN_BIND_ADDR: str = Field(default="0.0.0.0:8080", description="Listen address")

    # Path settings
    API_PATH_PREFIX: str = Field(default="/_ah/api/", description="Gateway path prefix")
    SPI_PATH_PREFIX: str = Field(default="/_ah/spi/", description="Backend SPI path prefix")
    API_EXPLORER_URL: str = Field(
        default="https://apis-explorer.appspot.com/apis-explorer/",
        description="API explorer the /explorer path redirects to",
    )

    # Backend integration
    BACKEND_URL: str = Field(default="http://localhost:8081", description="Backend SPI base URL")
    BACKEND_TIMEOUT: float = Field(default=30.0, description="Backend call timeout (seconds)")

    # FastAPI settings
    root_path: str = Field(default="", description="API root path (for proxy)")


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = GatewayConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
