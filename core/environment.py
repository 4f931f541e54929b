"""Runtime environment detection.

Serverless hosts get shorter browser timeouts and a few extra Chromium flags,
since they kill long requests and run in a restricted sandbox.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

SERVERLESS_TIMEOUTS = {
    'navigation': 15000,
    'element': 3000,
}

DEFAULT_TIMEOUTS = {
    'navigation': 20000,
    'element': 5000,
}

SERVERLESS_BROWSER_ARGS = [
    '--no-sandbox',
    '--disable-dev-shm-usage',
    '--single-process',
    '--no-zygote',
]


@dataclass
class RuntimeEnvironment:
    """Snapshot of the process environment relevant to the resolver."""
    app_env: str = 'production'
    is_vercel: bool = False
    is_heroku: bool = False
    is_netlify: bool = False
    timeouts: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_TIMEOUTS))

    @classmethod
    def detect(cls, environ: Optional[Mapping[str, str]] = None,
               timeouts: Optional[Mapping[str, int]] = None) -> 'RuntimeEnvironment':
        """
        Build an environment snapshot from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            timeouts: Configured non-serverless timeouts in milliseconds
        """
        env = os.environ if environ is None else environ
        merged = dict(DEFAULT_TIMEOUTS)
        if timeouts:
            merged.update({k: int(v) for k, v in timeouts.items() if k in DEFAULT_TIMEOUTS})
        return cls(
            app_env=(env.get('APP_ENV') or 'production').lower(),
            is_vercel='VERCEL' in env,
            is_heroku='DYNO' in env,
            is_netlify='NETLIFY' in env,
            timeouts=merged,
        )

    @property
    def is_development(self) -> bool:
        return self.app_env == 'development'

    @property
    def is_production(self) -> bool:
        return self.app_env == 'production'

    @property
    def is_test(self) -> bool:
        return self.app_env == 'test'

    @property
    def is_serverless(self) -> bool:
        return self.is_vercel or self.is_netlify

    def get_timeout(self, kind: str) -> int:
        """Timeout in milliseconds for 'navigation' or 'element' waits."""
        if kind not in DEFAULT_TIMEOUTS:
            raise ValueError(f"Unknown timeout kind: {kind}")
        if self.is_serverless:
            return SERVERLESS_TIMEOUTS[kind]
        return self.timeouts[kind]

    def browser_args(self) -> List[str]:
        if self.is_serverless:
            return list(SERVERLESS_BROWSER_ARGS)
        return []
