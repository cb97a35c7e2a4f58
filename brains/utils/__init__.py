from brains.utils.logging import setup_logging, get_logger, resolve_level

__all__ = ["setup_logging", "get_logger", "resolve_level"]
