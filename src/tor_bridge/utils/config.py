"""
Configuration management for Tor Bridge

Handles loading and validation of configuration from JSON files and environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..proxy.proxy_config import ProxyConfig, SocksVersion
from .error_handler import ConfigurationError


@dataclass
class TorConfig:
    """Tor Browser process configuration"""
    path: Optional[str] = None
    start_behavior: str = "return-existing"
    window_style: str = "hidden"
    retry_interval: float = 5.0
    max_wait: float = 60.0


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


@dataclass
class Config:
    """Main configuration class"""
    tor: TorConfig = field(default_factory=TorConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> 'Config':
        """Load configuration from JSON file with environment variable override"""
        config_path = Path(config_path)

        env_file = config_path.parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}") from None
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid configuration file {config_path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build configuration from a dict, letting environment variables override it"""
        tor_data = data.get('tor', {})
        proxy_data = data.get('proxy', {})
        logging_data = data.get('logging', {})
        defaults = cls()

        try:
            tor_config = TorConfig(
                path=os.getenv('TOR_PATH', tor_data.get('path', defaults.tor.path)),
                start_behavior=os.getenv(
                    'TOR_START_BEHAVIOR', tor_data.get('start_behavior', defaults.tor.start_behavior)
                ),
                window_style=os.getenv(
                    'TOR_WINDOW_STYLE', tor_data.get('window_style', defaults.tor.window_style)
                ),
                retry_interval=float(os.getenv(
                    'TOR_RETRY_INTERVAL', tor_data.get('retry_interval', defaults.tor.retry_interval)
                )),
                max_wait=float(os.getenv('TOR_MAX_WAIT', tor_data.get('max_wait', defaults.tor.max_wait)))
            )

            proxy_config = ProxyConfig(
                http_address=os.getenv('HTTP_ADDRESS', proxy_data.get('http_address', defaults.proxy.http_address)),
                http_port=int(os.getenv('HTTP_PORT', proxy_data.get('http_port', defaults.proxy.http_port))),
                socks_address=os.getenv(
                    'SOCKS_ADDRESS', proxy_data.get('socks_address', defaults.proxy.socks_address)
                ),
                socks_port=int(os.getenv('SOCKS_PORT', proxy_data.get('socks_port', defaults.proxy.socks_port))),
                version=SocksVersion.parse(
                    os.getenv('SOCKS_VERSION', proxy_data.get('version', defaults.proxy.version))
                ),
                username=os.getenv('SOCKS_USERNAME', proxy_data.get('username', defaults.proxy.username)),
                password=os.getenv('SOCKS_PASSWORD', proxy_data.get('password', defaults.proxy.password)),
                tor_path=os.getenv('TOR_PATH', tor_data.get('path', defaults.tor.path))
            )

            logging_config = LoggingConfig(
                level=os.getenv('LOG_LEVEL', logging_data.get('level', defaults.logging.level)),
                file=os.getenv('LOG_FILE', logging_data.get('file', defaults.logging.file)),
                max_bytes=int(os.getenv('LOG_MAX_BYTES', logging_data.get('max_bytes', defaults.logging.max_bytes))),
                backup_count=int(os.getenv(
                    'LOG_BACKUP_COUNT', logging_data.get('backup_count', defaults.logging.backup_count)
                ))
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

        return cls(tor=tor_config, proxy=proxy_config, logging=logging_config)

    def validate(self) -> bool:
        """Validate configuration values"""
        errors = []

        if not self.tor.path:
            errors.append("Tor Browser path is required")

        if self.tor.retry_interval < 0:
            errors.append("Retry interval cannot be negative")

        if self.tor.max_wait < 0:
            errors.append("Max wait cannot be negative")

        errors.extend(self.proxy.validate())

        if self.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown log level: {self.logging.level}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        return True


def resolve_executable(path) -> Path:
    """
    Resolve a Tor Browser location to the browser executable.

    Accepts either the executable itself or the root of a Tor Browser
    installation, in which case Browser/firefox(.exe) is used.
    """
    if path is None or not str(path).strip():
        raise ConfigurationError("Tor Browser path is missing or empty")

    candidate = Path(path).expanduser()
    if candidate.is_file():
        return candidate.resolve()

    if candidate.is_dir():
        for name in ("firefox.exe", "firefox"):
            exe = candidate / "Browser" / name
            if exe.is_file():
                return exe.resolve()
        raise ConfigurationError(f"No browser executable found under {candidate / 'Browser'}")

    raise ConfigurationError(f"Tor Browser path does not exist: {candidate}")
