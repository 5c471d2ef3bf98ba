"""
Unit tests for Config
"""

import json
import os
import tempfile
from pathlib import Path

import pytest

from tor_bridge.proxy.proxy_config import ProxyConfig, SocksVersion
from tor_bridge.utils.config import Config, LoggingConfig, TorConfig, resolve_executable
from tor_bridge.utils.error_handler import ConfigurationError

ENV_VARS = [
    'TOR_PATH', 'TOR_START_BEHAVIOR', 'TOR_WINDOW_STYLE', 'TOR_RETRY_INTERVAL', 'TOR_MAX_WAIT',
    'SOCKS_ADDRESS', 'SOCKS_PORT', 'SOCKS_VERSION', 'SOCKS_USERNAME', 'SOCKS_PASSWORD',
    'HTTP_ADDRESS', 'HTTP_PORT', 'LOG_LEVEL', 'LOG_FILE', 'LOG_MAX_BYTES', 'LOG_BACKUP_COUNT',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_config(data) -> Path:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(data, f)
        return Path(f.name)


class TestConfig:
    """Test cases for configuration management"""

    def test_config_dataclasses(self):
        """Test configuration dataclass defaults"""
        tor_config = TorConfig()
        assert tor_config.path is None
        assert tor_config.start_behavior == "return-existing"
        assert tor_config.window_style == "hidden"
        assert tor_config.retry_interval == 5.0
        assert tor_config.max_wait == 60.0

        proxy_config = ProxyConfig()
        assert proxy_config.socks_address == "127.0.0.1"
        assert proxy_config.socks_port == 9150
        assert proxy_config.version == SocksVersion.FIVE

        logging_config = LoggingConfig()
        assert logging_config.level == "INFO"
        assert logging_config.file is None
        assert logging_config.backup_count == 5

    def test_load_from_file_basic(self):
        """Test basic configuration file loading"""
        config_data = {
            "tor": {
                "path": "/opt/tor-browser",
                "start_behavior": "kill-existings",
                "window_style": "normal",
                "retry_interval": 3,
                "max_wait": 120
            },
            "proxy": {
                "socks_address": "10.0.0.2",
                "socks_port": "9050",
                "version": 4,
                "username": "alice",
                "password": "secret"
            },
            "logging": {
                "level": "DEBUG",
                "file": "logs/tor_bridge.log",
                "max_bytes": 1024,
                "backup_count": 2
            }
        }
        temp_path = write_config(config_data)

        try:
            config = Config.load_from_file(temp_path)

            assert config.tor.path == "/opt/tor-browser"
            assert config.tor.start_behavior == "kill-existings"
            assert config.tor.window_style == "normal"
            assert config.tor.retry_interval == 3.0
            assert config.tor.max_wait == 120.0

            assert config.proxy.socks_address == "10.0.0.2"
            assert config.proxy.socks_port == 9050
            assert config.proxy.version == SocksVersion.FOUR
            assert config.proxy.username == "alice"
            assert config.proxy.password == "secret"
            assert config.proxy.tor_path == "/opt/tor-browser"
            assert config.proxy.http_port == 12345

            assert config.logging.level == "DEBUG"
            assert config.logging.file == "logs/tor_bridge.log"
            assert config.logging.max_bytes == 1024
            assert config.logging.backup_count == 2
        finally:
            os.unlink(temp_path)

    def test_load_from_file_with_env_override(self, monkeypatch):
        """Test configuration loading with environment variable override"""
        temp_path = write_config({"tor": {"path": "/from/file"}, "proxy": {"socks_port": 9150}})
        monkeypatch.setenv('TOR_PATH', '/from/env')
        monkeypatch.setenv('SOCKS_PORT', '9050')
        monkeypatch.setenv('SOCKS_VERSION', 'socks5')
        monkeypatch.setenv('TOR_MAX_WAIT', '15')

        try:
            config = Config.load_from_file(temp_path)

            assert config.tor.path == "/from/env"
            assert config.proxy.tor_path == "/from/env"
            assert config.proxy.socks_port == 9050
            assert config.proxy.version == SocksVersion.FIVE
            assert config.tor.max_wait == 15.0
        finally:
            os.unlink(temp_path)

    def test_load_from_file_reads_dotenv(self, tmp_path, monkeypatch):
        """Test that a .env next to the config file is loaded"""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({}))
        (tmp_path / ".env").write_text("TOR_PATH=/from/dotenv\n")
        # Make monkeypatch remove what load_dotenv puts into os.environ
        monkeypatch.setenv('TOR_PATH', '')
        monkeypatch.delenv('TOR_PATH')

        config = Config.load_from_file(config_file)

        assert config.tor.path == "/from/dotenv"

    def test_missing_sections_use_defaults(self):
        """Test that an empty configuration falls back to defaults"""
        config = Config.from_dict({})

        assert config.tor == TorConfig()
        assert config.proxy == ProxyConfig()
        assert config.logging == LoggingConfig()

    def test_missing_file(self, tmp_path):
        """Test that a missing configuration file raises ConfigurationError"""
        with pytest.raises(ConfigurationError, match="not found"):
            Config.load_from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test that malformed JSON raises ConfigurationError"""
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid configuration file"):
            Config.load_from_file(config_file)

    def test_invalid_values(self):
        """Test that values of the wrong type raise ConfigurationError"""
        with pytest.raises(ConfigurationError, match="Invalid configuration value"):
            Config.from_dict({"proxy": {"socks_port": "ninety"}})

        with pytest.raises(ConfigurationError):
            Config.from_dict({"proxy": {"version": 6}})

    def test_validation(self):
        """Test configuration validation"""
        config = Config(tor=TorConfig(path="/opt/tor-browser"))
        assert config.validate() is True

        config.tor.path = None
        config.tor.retry_interval = -1
        config.proxy.socks_port = 0
        config.proxy.username = None
        config.proxy.password = "secret"
        config.logging.level = "LOUD"

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert "Tor Browser path is required" in message
        assert "Retry interval cannot be negative" in message
        assert "SOCKS port must be between 1 and 65535" in message
        assert "SOCKS password requires a username" in message
        assert "Unknown log level: LOUD" in message


class TestResolveExecutable:
    """Test cases for resolve_executable"""

    def test_file_path(self, tmp_path):
        exe = tmp_path / "firefox.exe"
        exe.write_text("")

        assert resolve_executable(str(exe)) == exe.resolve()

    def test_installation_directory(self, tmp_path):
        browser = tmp_path / "Tor Browser" / "Browser"
        browser.mkdir(parents=True)
        (browser / "firefox.exe").write_text("")

        assert resolve_executable(tmp_path / "Tor Browser") == (browser / "firefox.exe").resolve()

    def test_installation_directory_without_browser(self, tmp_path):
        with pytest.raises(ConfigurationError, match="No browser executable"):
            resolve_executable(tmp_path)

    @pytest.mark.parametrize("path", [None, "", "   "])
    def test_blank_path(self, path):
        with pytest.raises(ConfigurationError, match="missing or empty"):
            resolve_executable(path)

    def test_missing_path(self, tmp_path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            resolve_executable(tmp_path / "missing")
