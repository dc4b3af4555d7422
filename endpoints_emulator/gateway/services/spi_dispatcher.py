"""
SPI Dispatcher Service

Forwards normalized API requests to the backend SPI and turns backend
failures into gateway-shaped errors.
"""

import json
import logging

import httpx

from endpoints_emulator.gateway.core.api_request import ApiRequest
from endpoints_emulator.gateway.core.error_info import (
    DEFAULT_STATUS_CODE_MAPPING,
    StatusCodeMapping,
)
from endpoints_emulator.gateway.core.errors import backend_error
from endpoints_emulator.gateway.core.exceptions import BackendUnreachableError, RequestError
from endpoints_emulator.gateway.core.rpc import transform_rpc_request

logger = logging.getLogger("gateway.spi")


class SpiDispatcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        backend_url: str,
        spi_prefix: str = "/_ah/spi/",
        status_mapping: StatusCodeMapping = DEFAULT_STATUS_CODE_MAPPING,
    ):
        """
        Args:
            client: Shared httpx.AsyncClient
            backend_url: Base URL of the backend
            spi_prefix: Path prefix of the backend's SPI methods
            status_mapping: Backend status translation table
        """
        self.client = client
        self.backend_url = backend_url.rstrip("/")
        self.spi_prefix = spi_prefix
        self.status_mapping = status_mapping

    def spi_url(self, method_name: str) -> str:
        return f"{self.backend_url}{self.spi_prefix}{method_name}"

    async def dispatch(self, request: ApiRequest) -> bytes:
        """
        Call the backend for a normalized request.

        Returns:
            The backend response body

        Raises:
            RequestError: backend answered with a non-200 status
            BackendUnreachableError: backend could not be reached
        """
        if request.is_rpc:
            call = transform_rpc_request(request)
            method_name = call.method
            payload = json.dumps(call.params).encode("utf-8")
        else:
            method_name = request.path
            payload = request.body_stream().read()

        url = self.spi_url(method_name)
        logger.debug(
            f"Dispatching {method_name} to {url}",
            extra={"spi_method": method_name, "is_rpc": request.is_rpc},
        )

        try:
            response = await self.client.post(
                url,
                content=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            logger.error(
                f"Backend call failed for method '{method_name}'",
                extra={
                    "spi_method": method_name,
                    "target_url": url,
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise BackendUnreachableError(url, e) from e

        if response.status_code != 200:
            error = backend_error(response, self.status_mapping)
            logger.warning(
                f"Backend returned {response.status_code} for '{method_name}'",
                extra={
                    "spi_method": method_name,
                    "upstream_status": response.status_code,
                    "mapped_status": error.status_code,
                    "reason": error.reason,
                },
            )
            raise RequestError(error)

        return response.content
