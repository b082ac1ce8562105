"""GDS clients."""

from .base import BaseGDSClient
from .sabre import SabreClient

__all__ = ["BaseGDSClient", "SabreClient"]
