# fluxgate/logging/__init__.py
from fluxgate.logging.logger import DEFAULT_FORMAT, configure_logging, get_logger

__all__ = ["DEFAULT_FORMAT", "configure_logging", "get_logger"]
