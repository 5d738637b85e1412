"""Services layer."""

from .batch import BatchService
from .config_service import ConfigService

__all__ = ["BatchService", "ConfigService"]
