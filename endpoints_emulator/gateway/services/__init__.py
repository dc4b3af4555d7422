"""
Services package.

Provides integrations with the backend behind the gateway.
"""

from .spi_dispatcher import SpiDispatcher

__all__ = [
    "SpiDispatcher",
]
