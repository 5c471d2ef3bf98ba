"""
Proxy configuration

Describes the local endpoints exposed by a running Tor instance and the
browser executable that provides them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import quote


class SocksVersion(Enum):
    """SOCKS protocol version spoken by the local endpoint"""
    FOUR = 4
    FIVE = 5

    @classmethod
    def parse(cls, value) -> 'SocksVersion':
        """Accept 4, 5, "4", "5", "socks5" or an existing member"""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text.startswith("socks"):
            text = text[len("socks"):]
        try:
            return cls(int(text))
        except ValueError:
            raise ValueError(f"Unsupported SOCKS version: {value!r}") from None


@dataclass
class ProxyConfig:
    """Local proxy endpoints of the Tor Browser bundle"""
    http_address: str = "127.0.0.1"
    http_port: int = 12345
    socks_address: str = "127.0.0.1"
    socks_port: int = 9150
    version: SocksVersion = SocksVersion.FIVE
    username: Optional[str] = None
    password: Optional[str] = None
    tor_path: Optional[str] = None

    def proxy_url(self) -> str:
        """SOCKS URL usable as a requests proxy; host names resolve through the proxy"""
        scheme = "socks5h" if self.version == SocksVersion.FIVE else "socks4a"
        credentials = ""
        if self.username:
            credentials = quote(self.username, safe="")
            if self.password:
                credentials += ":" + quote(self.password, safe="")
            credentials += "@"
        return f"{scheme}://{credentials}{self.socks_address}:{self.socks_port}"

    def validate(self) -> list:
        """Return a list of problems, empty when the configuration is usable"""
        errors = []
        if not self.socks_address:
            errors.append("SOCKS address is required")
        if not 0 < self.socks_port < 65536:
            errors.append("SOCKS port must be between 1 and 65535")
        if not 0 < self.http_port < 65536:
            errors.append("HTTP port must be between 1 and 65535")
        if self.password and not self.username:
            errors.append("SOCKS password requires a username")
        return errors
