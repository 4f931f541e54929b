"""Configuration management for the link resolver."""
import yaml
from pathlib import Path
from typing import Any, Optional


def find_project_root(start_path: Path = None) -> Path:
    """Find the project root directory."""
    if start_path is None:
        start_path = Path(__file__).resolve()

    # Walk up the directory tree looking for project root markers
    current = start_path if start_path.is_dir() else start_path.parent

    while current.parent != current:
        if (current / 'config.yaml').exists():
            return current
        if (current / 'pyproject.toml').exists() and (current / 'scrapers').exists():
            return current
        current = current.parent

    # If no marker found, return current path
    return start_path.parent


class Config:
    """Load and manage configuration from YAML file."""

    def __init__(self, config_path: str = "config.yaml"):
        """Initialize configuration."""
        # If path is relative, find it relative to project root
        if not Path(config_path).is_absolute():
            project_root = find_project_root()
            config_path = project_root / config_path

        self.config_path = Path(config_path)
        with open(self.config_path, 'r', encoding='utf-8') as f:
            self.config = yaml.safe_load(f) or {}

    def get(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Get config value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'scrapers.googlenews.timeouts.navigation')
            default: Default value if not found

        Returns:
            Config value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if value is None:
                return default
            if isinstance(value, dict):
                value = value.get(key, default)
            else:
                return default

        return value

    def get_int(self, key_path: str, default: int) -> int:
        """Get an int value with fallback."""
        try:
            val = self.get(key_path, default)
            return int(val) if val is not None else int(default)
        except (TypeError, ValueError):
            return int(default)

    def get_bool(self, key_path: str, default: bool) -> bool:
        """Get a boolean value with common string conversions."""
        val = self.get(key_path, default)
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("1", "true", "yes", "on")
        if val is None:
            return bool(default)
        return bool(val)

    def get_scraper_config(self, scraper_type: str) -> dict:
        """
        Get scraper-specific configuration.

        Args:
            scraper_type: Type of scraper (e.g. 'googlenews')

        Returns:
            Configuration dict for the scraper
        """
        return (self.config.get('scrapers') or {}).get(scraper_type) or {}

    def get_backend_config(self) -> dict:
        """
        Get backend server configuration.

        Returns:
            Configuration dict with host, port, reload, and reload_dirs
        """
        return {
            'host': self.get('servers.backend.host', '0.0.0.0'),
            'port': self.get_int('servers.backend.port', 3001),
            'reload': self.get_bool('servers.backend.reload', False),
            'reload_dirs': self.get('servers.backend.reload_dirs', ['backend/app', 'scrapers', 'core', 'utils']),
        }

    def get_cors_config(self) -> dict:
        """
        Get CORS configuration.

        Returns:
            Configuration dict with allowed_origins, allow_credentials, allow_methods, and allow_headers
        """
        backend_port = self.get_int('servers.backend.port', 3001)

        default_origins = [
            'http://localhost:3000',
            'http://127.0.0.1:3000',
            f'http://localhost:{backend_port}',
            f'http://127.0.0.1:{backend_port}',
        ]

        return {
            'allowed_origins': self.get('servers.cors.allowed_origins', default_origins),
            'allow_credentials': self.get_bool('servers.cors.allow_credentials', True),
            'allow_methods': self.get('servers.cors.allow_methods', ['*']),
            'allow_headers': self.get('servers.cors.allow_headers', ['*']),
        }

    def get_browser_proxy_config(self) -> dict:
        """
        Get browser proxy configuration.

        Returns:
            Dict containing proxy settings suitable for Playwright
        """
        enabled = self.get('browser.proxy.enabled', False)
        server = self.get('browser.proxy.server', '')
        username = self.get('browser.proxy.username', '')
        password = self.get('browser.proxy.password', '')
        bypass = self.get('browser.proxy.bypass', [])

        # Normalise inputs
        server = (server or '').strip()
        username = (username or '').strip()
        password = (password or '').strip()

        if isinstance(bypass, str):
            bypass_list = [bypass.strip()] if bypass.strip() else []
        elif isinstance(bypass, list):
            bypass_list = [str(item).strip() for item in bypass if str(item).strip()]
        else:
            bypass_list = []

        return {
            'enabled': bool(enabled) and bool(server),
            'server': server,
            'username': username,
            'password': password,
            'bypass': bypass_list,
        }

    def get_history_config(self) -> dict:
        """
        Get recent-extractions history configuration.

        Returns:
            Dict with the absolute storage path and the max number of entries
        """
        path = Path(self.get('history.path', 'data/history/recent_extractions.json'))
        if not path.is_absolute():
            path = find_project_root() / path
        return {
            'path': path,
            'max_entries': self.get_int('history.max_entries', 5),
        }

    def get_logging_config(self) -> dict:
        """Get console/file log levels and the log file location."""
        log_file = Path(self.get('logging.file', 'logs/backend.log'))
        if not log_file.is_absolute():
            log_file = find_project_root() / log_file
        return {
            'console_level': self.get('logging.console_level', 'INFO'),
            'file_level': self.get('logging.file_level', 'DEBUG'),
            'file': log_file,
        }
