"""
Proxy-capable HTTP client

The readiness check only needs something that can GET a URL through the
local SOCKS endpoint; SocksHTTPClient does that with requests + PySocks.
"""

from typing import Optional, Protocol

import requests

from .proxy_config import ProxyConfig
from ..utils.logging_setup import get_logger

logger = get_logger('proxy_client')


class ProxyHTTPClient(Protocol):
    """Minimal HTTP client interface used by the readiness check"""

    def get(self, url: str) -> str:
        """Return the response body, raising on network or HTTP errors"""
        ...


class SocksHTTPClient:
    """HTTP client routing every request through a SOCKS proxy"""

    def __init__(self, config: Optional[ProxyConfig] = None, timeout: float = 30.0):
        self.config = config or ProxyConfig()
        self.timeout = timeout
        self.session = requests.Session()
        proxy_url = self.config.proxy_url()
        self.session.proxies = {"http": proxy_url, "https": proxy_url}
        # Ignore HTTP(S)_PROXY from the environment
        self.session.trust_env = False

    def get(self, url: str) -> str:
        logger.debug(f"GET {url} via {self.config.socks_address}:{self.config.socks_port}")
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def close(self):
        self.session.close()

    def __enter__(self) -> 'SocksHTTPClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
