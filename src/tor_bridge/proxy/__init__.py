"""
Proxy components for Tor Bridge

Contains the local proxy endpoint configuration and the HTTP client that
routes through it.
"""

from .proxy_config import ProxyConfig, SocksVersion
from .proxy_client import ProxyHTTPClient, SocksHTTPClient

__all__ = ["ProxyConfig", "SocksVersion", "ProxyHTTPClient", "SocksHTTPClient"]
