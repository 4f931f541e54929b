"""Shared fixtures for the test suite."""
import sys
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[1]
BACKEND_PATH = PROJECT_ROOT / 'backend'
for path in (PROJECT_ROOT, BACKEND_PATH):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from core.config import Config
from core.environment import RuntimeEnvironment


@pytest.fixture
def make_config(tmp_path):
    """Write a config.yaml into tmp_path and load it."""
    def _make(data: Dict[str, Any]) -> Config:
        path = tmp_path / 'config.yaml'
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f)
        return Config(str(path))
    return _make


@pytest.fixture
def resolver_config(make_config):
    return make_config({
        'scrapers': {
            'googlenews': {
                'headless': True,
                'redirect_wait_ms': 1000,
                'click_settle_ms': 0,
            }
        },
        'history': {'path': 'unused.json'},
    })


@pytest.fixture
def environment():
    return RuntimeEnvironment.detect(environ={})
