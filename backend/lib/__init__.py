"""
Backend library module - process-wide helpers shared by the app and run_server.
"""

from lib.logging_setup import setup_logging

__all__ = [
    'setup_logging',
]
