"""
Utility modules for Tor Bridge

Contains configuration management, logging setup, and error handling.
"""

from .config import Config, TorConfig, LoggingConfig, resolve_executable
from .logging_setup import setup_logging, get_logger
from .error_handler import (
    ErrorHandler,
    ErrorInfo,
    ErrorCategory,
    TorBridgeError,
    ConfigurationError,
    AlreadyRunningError,
    LaunchError,
    ControllerDisposedError,
)

__all__ = [
    "Config",
    "TorConfig",
    "LoggingConfig",
    "resolve_executable",
    "setup_logging",
    "get_logger",
    "ErrorHandler",
    "ErrorInfo",
    "ErrorCategory",
    "TorBridgeError",
    "ConfigurationError",
    "AlreadyRunningError",
    "LaunchError",
    "ControllerDisposedError",
]
