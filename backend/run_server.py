#!/usr/bin/env python
"""
Run the FastAPI server with startup validation.
"""
import argparse
import os
import socket
import sys
from pathlib import Path
from typing import Optional

import uvicorn
from loguru import logger

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import Config
from lib.logging_setup import setup_logging


def check_port_available(host: str, port: int) -> bool:
    """Check if a port is available."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(1)
            result = sock.connect_ex((host if host != '0.0.0.0' else '127.0.0.1', port))
            return result != 0  # Port is available if connection fails
    except OSError as e:
        logger.warning(f"Could not check port availability: {e}")
        return True  # Assume available if we can't check


def validate_startup(backend_config: dict) -> bool:
    """Validate that the app can be imported and the port is free."""
    try:
        logger.info("Validating backend startup...")
        logger.info(f"Backend config: host={backend_config['host']}, port={backend_config['port']}")

        from app.main import app  # noqa: F401
        logger.info("App module imported successfully")

        if not check_port_available(backend_config['host'], backend_config['port']):
            logger.warning(f"Port {backend_config['port']} appears to be in use. Server may fail to start.")
        else:
            logger.info(f"Port {backend_config['port']} is available")

        return True

    except Exception:
        logger.exception("Startup validation failed")
        return False


def resolve_backend_config(config: Config, host: Optional[str], port: Optional[int]) -> dict:
    """Merge CLI and environment overrides into the configured host/port."""
    backend_config = config.get_backend_config()

    env_host = os.environ.get("BACKEND_HOST_OVERRIDE")
    env_port = os.environ.get("BACKEND_PORT_OVERRIDE")
    env_port_int = None
    if env_port:
        try:
            env_port_int = int(env_port)
        except ValueError:
            logger.warning(f"Ignoring non-numeric BACKEND_PORT_OVERRIDE: {env_port}")

    override_host = host or env_host
    override_port = port if port is not None else env_port_int
    if override_host is not None:
        backend_config['host'] = override_host
    if override_port is not None:
        backend_config['port'] = override_port
    return backend_config


def main():
    parser = argparse.ArgumentParser(description="Run Google News link resolver backend server")
    parser.add_argument("--host", type=str, help="Override host to bind")
    parser.add_argument("--port", type=int, help="Override port to bind")
    args = parser.parse_args()

    config = Config()
    logging_config = config.get_logging_config()
    setup_logging(
        enable_console=True,
        console_colorize=True,
        console_level=logging_config['console_level'],
        file_level=logging_config['file_level'],
        log_file=logging_config['file'],
    )

    logger.info("Starting Google News link resolver backend")
    backend_config = resolve_backend_config(config, args.host, args.port)

    if not validate_startup(backend_config):
        logger.error("Startup validation failed. Exiting.")
        sys.exit(1)

    try:
        logger.info(f"Starting server on {backend_config['host']}:{backend_config['port']}")
        uvicorn.run(
            "app.main:app",
            host=backend_config['host'],
            port=backend_config['port'],
            reload=backend_config['reload'],
            reload_dirs=backend_config['reload_dirs'] if backend_config['reload'] else None,
            log_level="info",
            log_config=None,  # Use our Loguru-based config
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Server failed to start")
        sys.exit(1)


if __name__ == "__main__":
    main()
