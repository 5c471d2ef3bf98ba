"""
Error Handling for Tor Bridge

Defines the error taxonomy raised by the process controller and the
best-effort error sink used where failures are absorbed instead of raised.
"""

import threading
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .logging_setup import get_logger

logger = get_logger('error_handler')


class ErrorCategory(Enum):
    """Categories of errors"""
    CONFIGURATION = "config"        # Bad or missing executable path, invalid settings
    ALREADY_RUNNING = "already_running"  # Start policy violation
    LAUNCH = "launch"               # Process creation failed
    READINESS = "readiness"         # Readiness check attempt failed (transient)
    TERMINATION = "termination"     # Kill or handle release failed
    DISCOVERY = "discovery"         # Process table introspection failed
    INTERNAL = "internal"


class TorBridgeError(Exception):
    """Base class for errors raised by Tor Bridge"""

    category = ErrorCategory.INTERNAL


class ConfigurationError(TorBridgeError):
    """Invalid configuration; fatal for the component being built"""

    category = ErrorCategory.CONFIGURATION


class AlreadyRunningError(TorBridgeError):
    """A matching instance is running and the start policy forbids adopting it"""

    category = ErrorCategory.ALREADY_RUNNING


class LaunchError(TorBridgeError):
    """The executable could not be started; the controller stays usable"""

    category = ErrorCategory.LAUNCH


class ControllerDisposedError(TorBridgeError):
    """Operation attempted on a controller that has been disposed"""

    category = ErrorCategory.INTERNAL


@dataclass
class ErrorInfo:
    """Information about an absorbed error"""
    error: Exception
    category: ErrorCategory
    message: str
    context: Dict = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict:
        """Convert to dictionary for logging"""
        return {
            'error_type': type(self.error).__name__,
            'category': self.category.value,
            'message': self.message,
            'context': self.context,
            'timestamp': self.timestamp,
            'traceback': ''.join(traceback.format_exception(
                type(self.error), self.error, self.error.__traceback__
            )),
        }


class ErrorHandler:
    """Records errors swallowed by best-effort operations"""

    def __init__(self, max_history: int = 100):
        self.max_history = max_history
        self.error_history: List[ErrorInfo] = []
        self.error_counts: Dict[ErrorCategory, int] = {cat: 0 for cat in ErrorCategory}
        self._lock = threading.Lock()

    def record(self, error: Exception, category: ErrorCategory,
               context: Optional[Dict] = None) -> ErrorInfo:
        """Record an absorbed error and log it at debug level"""
        error_info = ErrorInfo(
            error=error,
            category=category,
            message=str(error) or type(error).__name__,
            context=context or {},
        )

        with self._lock:
            self.error_counts[category] += 1
            self.error_history.append(error_info)
            if len(self.error_history) > self.max_history:
                self.error_history = self.error_history[-self.max_history:]

        logger.debug(
            f"Suppressed {category.value} error: {type(error).__name__}: {error_info.message} "
            f"{error_info.context}"
        )
        return error_info

    @contextmanager
    def suppress(self, category: ErrorCategory, **context) -> Iterator[None]:
        """Absorb any exception raised inside the block, recording it under category"""
        try:
            yield
        except Exception as e:
            self.record(e, category, context)

    def get_recent_errors(self, count: int = 10) -> List[ErrorInfo]:
        """Get recent errors"""
        with self._lock:
            return self.error_history[-count:] if self.error_history else []

    def get_error_stats(self) -> Dict[str, int]:
        """Get error counts keyed by category value"""
        with self._lock:
            return {cat.value: count for cat, count in self.error_counts.items()}

    def clear_error_history(self):
        """Clear error history"""
        with self._lock:
            self.error_history.clear()
            self.error_counts = {cat: 0 for cat in ErrorCategory}
