"""
Tor Bridge - Tor Browser process management

Starts or adopts a Tor Browser instance, confirms that traffic is routed
through it, and shuts it down again.
"""

__version__ = "1.0.0"

from .process_control.process_controller import TorProcessController, StartBehavior
from .process_control.launcher import WindowStyle
from .proxy.proxy_config import ProxyConfig, SocksVersion
from .proxy.proxy_client import SocksHTTPClient
from .utils.config import Config

__all__ = [
    "TorProcessController",
    "StartBehavior",
    "WindowStyle",
    "ProxyConfig",
    "SocksVersion",
    "SocksHTTPClient",
    "Config",
]
