"""Gateway shared utilities package."""

from gateway_shared.config import BaseServiceSettings
from gateway_shared.logging import setup_logging

__all__ = ["BaseServiceSettings", "setup_logging"]
