"""
Tor Browser Process Controller

Finds, starts, stops and health-checks the Tor Browser process that the
host application routes its traffic through.
"""

import re
import threading
import time
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import psutil

from .launcher import ProcessLauncher, WindowStyle
from .process_table import ProcessTable, PsutilProcessTable, TorIdentity, find_matching
from ..proxy.proxy_client import ProxyHTTPClient, SocksHTTPClient
from ..proxy.proxy_config import ProxyConfig
from ..utils.config import resolve_executable
from ..utils.error_handler import (
    AlreadyRunningError,
    ControllerDisposedError,
    ErrorCategory,
    ErrorHandler,
    LaunchError,
)
from ..utils.logging_setup import get_logger

logger = get_logger('process_controller')

CHECK_URL = "https://check.torproject.org/"
TOR_OK = re.compile(r"<h1[^>]*>\s*congratulations", re.IGNORECASE)

DEFAULT_RETRY_INTERVAL = 5.0
DEFAULT_MAX_WAIT = 60.0
MIN_RETRY_INTERVAL = 0.1
FALLBACK_MAX_WAIT = 5.0

Seconds = Union[float, int, timedelta]


class StartBehavior(Enum):
    """What start() does when a Tor Browser is already running"""
    THROW_IF_RUNNING = "throw-if-running"
    RETURN_EXISTING = "return-existing"
    KILL_EXISTINGS = "kill-existings"

    @classmethod
    def parse(cls, value) -> 'StartBehavior':
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("_", "-")
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown start behavior: {value!r}") from None


class DisposalFlag:
    """Set-once flag; exactly one caller wins the transition"""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()

    def try_set(self) -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to timeout seconds; returns True early if the flag gets set"""
        return self._event.wait(timeout)


def _to_seconds(value: Seconds) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def normalize_wait(retry_interval: Seconds, max_wait: Seconds) -> Tuple[float, float]:
    """Clamp readiness polling parameters to usable values, in seconds"""
    retry_interval = _to_seconds(retry_interval)
    max_wait = _to_seconds(max_wait)
    if retry_interval <= 0:
        retry_interval = MIN_RETRY_INTERVAL
    if max_wait <= 0 or max_wait < retry_interval:
        max_wait = FALLBACK_MAX_WAIT
    return retry_interval, max_wait


def _has_exited(process: psutil.Process) -> bool:
    try:
        if not process.is_running():
            return True
        return process.status() == psutil.STATUS_ZOMBIE
    except (psutil.Error, OSError):
        return True


def _same_process(a: psutil.Process, b: psutil.Process) -> bool:
    """Same PID and same creation time, so a recycled PID does not match"""
    if a.pid != b.pid:
        return False
    try:
        return a.create_time() == b.create_time()
    except (psutil.Error, OSError):
        return False


class TorProcessController:
    """Controls a single Tor Browser process"""

    def __init__(
        self,
        path: Union[str, Path, None] = None,
        proxy_config: Optional[ProxyConfig] = None,
        http_client: Optional[ProxyHTTPClient] = None,
        process_table: Optional[ProcessTable] = None,
        launcher: Optional[ProcessLauncher] = None,
        error_handler: Optional[ErrorHandler] = None,
        reap_timeout: float = 3.0,
    ):
        self.proxy_config = proxy_config or ProxyConfig()
        self.executable = resolve_executable(path if path is not None else self.proxy_config.tor_path)
        self.identity = TorIdentity(self.executable)
        self.http_client = http_client
        self.process_table = process_table or PsutilProcessTable()
        self.launcher = launcher or ProcessLauncher()
        self.error_handler = error_handler or ErrorHandler()
        self.reap_timeout = reap_timeout

        self._process: Optional[psutil.Process] = None
        self._lock = threading.Lock()
        self._disposal = DisposalFlag()

    @property
    def current_process(self) -> Optional[psutil.Process]:
        """Process started by this controller, or None"""
        with self._lock:
            if self._process is not None and _has_exited(self._process):
                logger.info(f"Tor Browser (PID {self._process.pid}) exited on its own")
                self._process = None
            return self._process

    @property
    def is_disposed(self) -> bool:
        return self._disposal.is_set

    def find_running_instances(self) -> List[psutil.Process]:
        """Tor Browser processes on this host, whoever started them"""
        return find_matching(self.process_table, self.identity, self.error_handler)

    def start(
        self,
        behavior: StartBehavior = StartBehavior.RETURN_EXISTING,
        window_style: WindowStyle = WindowStyle.HIDDEN,
    ) -> psutil.Process:
        """
        Start Tor Browser, or deal with a running one according to behavior.

        Returns the process handle. Raises AlreadyRunningError under
        THROW_IF_RUNNING and LaunchError if the executable cannot be started.
        """
        if self.is_disposed:
            raise ControllerDisposedError("Controller has been disposed")

        behavior = StartBehavior.parse(behavior)
        window_style = WindowStyle.parse(window_style)

        existing = self.find_running_instances()
        if existing:
            if behavior == StartBehavior.RETURN_EXISTING:
                current = self.current_process
                adopted = current if current is not None else existing[0]
                logger.info(f"Tor Browser already running (PID {adopted.pid}), reusing it")
                return adopted
            if behavior == StartBehavior.THROW_IF_RUNNING:
                raise AlreadyRunningError(
                    f"Tor Browser is already running (PID {', '.join(str(p.pid) for p in existing)})"
                )
            logger.info(f"Killing {len(existing)} running Tor Browser process(es)")
            self.kill_existing(existing)

        with self._lock:
            # dispose() may have run while discovery was in progress
            if self._disposal.is_set:
                raise ControllerDisposedError("Controller has been disposed")
            if self._process is not None and not _has_exited(self._process):
                return self._process

            logger.info(f"Starting Tor Browser: {self.executable}")
            try:
                process = self.launcher.launch(self.executable, window_style)
            except (OSError, ValueError, psutil.Error) as e:
                self._process = None
                raise LaunchError(f"Failed to start {self.executable}: {e}") from e

            if process is None:
                self._process = None
                raise LaunchError(f"Failed to start {self.executable}")

            self._process = process
            logger.info(f"Tor Browser started with PID {process.pid}")
            return process

    def kill_existing(self, processes: Optional[Iterable[psutil.Process]] = None):
        """Kill every given process (default: all running instances), ignoring failures"""
        if processes is None:
            processes = self.find_running_instances()

        for process in processes:
            if process is None:
                continue
            with self.error_handler.suppress(ErrorCategory.TERMINATION, pid=process.pid):
                if _has_exited(process):
                    continue
                try:
                    process.kill()
                except Exception as e:
                    self.error_handler.record(e, ErrorCategory.TERMINATION, {'pid': process.pid})
                    continue
                self._release(process)

    def wait_until_ready(
        self,
        retry_interval: Seconds = DEFAULT_RETRY_INTERVAL,
        max_wait: Seconds = DEFAULT_MAX_WAIT,
    ) -> bool:
        """
        Poll the Tor check page through the proxy until it confirms routing.

        Returns True once the page congratulates us. Returns False when the
        controller is disposed or max_wait elapses first.
        """
        retry_interval, max_wait = normalize_wait(retry_interval, max_wait)

        client = self.http_client
        owns_client = client is None
        if owns_client:
            client = SocksHTTPClient(self.proxy_config)

        deadline = time.monotonic() + max_wait
        attempts = 0
        try:
            while not self.is_disposed:
                if attempts > 0 and self._disposal.wait(retry_interval):
                    break
                attempts += 1

                html = None
                with self.error_handler.suppress(ErrorCategory.READINESS, url=CHECK_URL, attempt=attempts):
                    html = client.get(CHECK_URL)

                if self.is_disposed:
                    break
                if html and html.strip() and TOR_OK.search(html):
                    logger.info(f"Tor is routing traffic (confirmed after {attempts} attempt(s))")
                    return True
                if time.monotonic() >= deadline:
                    logger.warning(f"Tor not confirmed after {attempts} attempt(s) in {max_wait:.1f}s")
                    return False
        finally:
            if owns_client:
                client.close()

        logger.info("Stopped waiting for Tor: controller disposed")
        return False

    def dispose(self):
        """Kill the process this controller started. Safe to call repeatedly."""
        if not self._disposal.try_set():
            return

        with self._lock:
            process, self._process = self._process, None

        if process is None:
            return

        logger.info(f"Stopping Tor Browser (PID {process.pid})")
        try:
            process.kill()
        except Exception as e:
            # Already gone between the check and the kill
            self.error_handler.record(e, ErrorCategory.TERMINATION, {'pid': process.pid})
            self._kill_leftover(process)

        self._release(process)

    def close(self):
        self.dispose()

    def _kill_leftover(self, process: psutil.Process):
        for candidate in self.find_running_instances():
            if _same_process(candidate, process):
                if _has_exited(candidate):
                    with self.error_handler.suppress(ErrorCategory.TERMINATION, pid=candidate.pid):
                        candidate.kill()
                break

    def _release(self, process: psutil.Process):
        try:
            process.wait(timeout=self.reap_timeout)
        except psutil.TimeoutExpired:
            logger.warning(f"PID {process.pid} still running {self.reap_timeout}s after kill")
        except Exception as e:
            self.error_handler.record(e, ErrorCategory.TERMINATION, {'pid': process.pid})

    def __enter__(self) -> 'TorProcessController':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
