"""
Process control components for Tor Bridge

Contains Tor Browser process discovery, launch, termination and readiness checks.
"""

from .launcher import ProcessLauncher, WindowStyle
from .process_controller import TorProcessController, StartBehavior, DisposalFlag
from .process_table import ProcessTable, PsutilProcessTable, TorIdentity

__all__ = [
    "TorProcessController",
    "StartBehavior",
    "DisposalFlag",
    "ProcessLauncher",
    "WindowStyle",
    "ProcessTable",
    "PsutilProcessTable",
    "TorIdentity",
]
