"""
Process table access

Enumerates host processes and decides which of them are Tor Browser
instances. Discovery is a heuristic scan: an instance started by this
program and one started by the user look the same from here.
"""

import re
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

import psutil

from ..utils.error_handler import ErrorCategory, ErrorHandler
from ..utils.logging_setup import get_logger

logger = get_logger('process_table')

FIREFOX_NAME = re.compile(r"^\s*Firefox", re.IGNORECASE)
TOR_BROWSER_PATH = re.compile(r"\WTor\s*Browser\W", re.IGNORECASE)

# Raised by psutil (or the OS) while reading a single process
INTROSPECTION_ERRORS = (psutil.Error, OSError)


class ProcessTable(Protocol):
    """Source of host processes"""

    def processes(self) -> Iterable[psutil.Process]:
        ...


class PsutilProcessTable:
    """Live process table backed by psutil"""

    def processes(self) -> Iterable[psutil.Process]:
        return psutil.process_iter()


class TorIdentity:
    """Identity heuristics for Tor Browser processes"""

    def __init__(self, executable: Path):
        self.executable = Path(executable)
        self._executable_key = str(self.executable).casefold()

    def matches(self, process: psutil.Process) -> bool:
        """True when the process looks like the configured Tor Browser"""
        if not FIREFOX_NAME.search(process.name() or ""):
            return False

        exe = process.exe()
        if not exe or not exe.strip():
            return False

        return exe.casefold() == self._executable_key or bool(TOR_BROWSER_PATH.search(exe))


def find_matching(table: ProcessTable, identity: TorIdentity,
                  error_handler: Optional[ErrorHandler] = None) -> List[psutil.Process]:
    """Scan the process table, skipping anything that cannot be inspected"""
    matches = []

    try:
        candidates = list(table.processes())
    except INTROSPECTION_ERRORS as e:
        logger.warning(f"Could not enumerate processes: {e}")
        if error_handler is not None:
            error_handler.record(e, ErrorCategory.DISCOVERY)
        return matches

    for process in candidates:
        try:
            if identity.matches(process):
                matches.append(process)
        except INTROSPECTION_ERRORS:
            # Gone, zombie, or owned by someone else
            continue

    logger.debug(f"Found {len(matches)} running Tor Browser process(es)")
    return matches
