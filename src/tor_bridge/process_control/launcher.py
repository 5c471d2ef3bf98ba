"""
Tor Browser launcher

Starts the browser executable with the arguments the controller relies on.
"""

import os
import subprocess
from enum import Enum
from pathlib import Path

import psutil

from ..utils.logging_setup import get_logger

logger = get_logger('launcher')

# Do not open extra network listeners (no remote control, new instance)
LAUNCH_ARGUMENTS = ["-n"]


class WindowStyle(Enum):
    """Initial window visibility; values are Win32 ShowWindow commands"""
    HIDDEN = 0
    NORMAL = 1
    MINIMIZED = 2
    MAXIMIZED = 3

    @classmethod
    def parse(cls, value) -> 'WindowStyle':
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper().replace("-", "_")]
        except KeyError:
            raise ValueError(f"Unknown window style: {value!r}") from None


class ProcessLauncher:
    """Launches the executable as a detached child process"""

    def build_command(self, executable: Path) -> list:
        return [str(executable)] + LAUNCH_ARGUMENTS

    def launch(self, executable: Path, window_style: WindowStyle = WindowStyle.HIDDEN) -> psutil.Popen:
        command = self.build_command(executable)
        kwargs = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
            "cwd": str(Path(executable).parent),
        }

        if os.name == "nt":
            startupinfo = subprocess.STARTUPINFO()
            startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW
            startupinfo.wShowWindow = window_style.value
            kwargs["startupinfo"] = startupinfo
        elif window_style != WindowStyle.HIDDEN:
            logger.debug(f"Window style {window_style.name} has no effect on this platform")

        logger.debug(f"Launching: {' '.join(command)}")
        return psutil.Popen(command, **kwargs)
