"""Base scraper class owning the Playwright browser lifecycle."""
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional
from loguru import logger
from playwright.sync_api import sync_playwright, BrowserContext
from core.config import Config
from core.environment import RuntimeEnvironment


class BaseScraper(ABC):
    """Abstract base class for browser-driven scrapers."""

    def __init__(self, config: Optional[Config] = None,
                 environment: Optional[RuntimeEnvironment] = None, **kwargs):
        """
        Initialize base scraper.

        Args:
            config: Configuration object
            environment: Runtime environment (detected from os.environ if omitted)
            **kwargs: Additional scraper-specific parameters
        """
        self.config = config or Config()
        self.scraper_type = self.__class__.__name__.lower().replace('scraper', '')
        self.scraper_config = self.config.get_scraper_config(self.scraper_type)
        self.environment = environment or RuntimeEnvironment.detect(
            timeouts=self.scraper_config.get('timeouts')
        )

        # Browser settings
        self.headless = kwargs.get('headless', self.scraper_config.get('headless', True))
        self.navigation_timeout = kwargs.get('timeout', self.environment.get_timeout('navigation'))
        self.element_timeout = kwargs.get('element_timeout', self.environment.get_timeout('element'))
        self.user_agent = self.scraper_config.get('user_agent')
        self.viewport = self.scraper_config.get('viewport') or {'width': 1280, 'height': 720}
        self.ignore_https_errors = bool(self.scraper_config.get('ignore_https_errors', True))
        self.proxy_config = self.config.get_browser_proxy_config()

        # Browser resources (lazy initialization)
        self._playwright = None
        self._browser = None
        self._context = None

    def _init_playwright(self):
        """Initialize Playwright browser (lazy loading)."""
        if self._browser:
            return

        try:
            logger.info(f"[{self.scraper_type}] Initializing Playwright...")
            self._playwright = sync_playwright().start()

            chrome_args = ['--disable-blink-features=AutomationControlled']
            if self.headless:
                chrome_args.append('--disable-gpu')
            chrome_args.extend(self.environment.browser_args())

            proxy_settings = None
            if self.proxy_config.get('enabled'):
                proxy_settings = {
                    'server': self.proxy_config['server']
                }
                if self.proxy_config.get('username'):
                    proxy_settings['username'] = self.proxy_config['username']
                if self.proxy_config.get('password'):
                    proxy_settings['password'] = self.proxy_config['password']
                if self.proxy_config.get('bypass'):
                    proxy_settings['bypass'] = ",".join(self.proxy_config['bypass'])
                logger.info(f"[{self.scraper_type}] Launching browser with proxy {self.proxy_config['server']}")
            elif self.proxy_config.get('server'):
                logger.warning(f"[{self.scraper_type}] Proxy server configured but disabled; set browser.proxy.enabled to true to use it")

            if self.environment.is_serverless:
                logger.info(f"[{self.scraper_type}] Serverless platform detected, using reduced timeouts")

            self._browser = self._playwright.chromium.launch(
                headless=self.headless,
                args=chrome_args,
                proxy=proxy_settings
            )
            logger.debug(f"[{self.scraper_type}] Browser initialized")
        except Exception as e:
            logger.error(f"[{self.scraper_type}] Failed to initialize browser: {e}")
            raise

    def _create_context(self) -> BrowserContext:
        """
        Create a new browser context.

        Returns:
            Browser context
        """
        if not self._browser:
            self._init_playwright()

        options = {
            'viewport': {
                'width': int(self.viewport.get('width', 1280)),
                'height': int(self.viewport.get('height', 720)),
            },
            'ignore_https_errors': self.ignore_https_errors,
        }
        if self.user_agent:
            options['user_agent'] = self.user_agent
        return self._browser.new_context(**options)

    def _result(self, url: str, **fields) -> Dict:
        """Build a result payload with the fields every result carries."""
        result = {
            'success': False,
            'url': url,
            'target_url': None,
            'strategy': None,
            'extraction_method': self.scraper_type,
            'extraction_timestamp': datetime.now().isoformat(),
            'elapsed_seconds': None,
            'error': None,
            'error_type': None,
        }
        result.update(fields)
        return result

    def _error_result(self, url: str, error: str, error_type: str = 'failure',
                      started_at: Optional[float] = None, **extra_fields) -> Dict:
        """
        Build a standardized error result payload.

        Args:
            url: URL that failed to resolve
            error: Error message
            error_type: 'validation', 'not_found' or 'failure'
            started_at: time.time() when the extraction started
            **extra_fields: Additional fields to merge into result

        Returns:
            Dictionary representing an error result
        """
        elapsed = round(time.time() - started_at, 2) if started_at else None
        return self._result(url, error=error, error_type=error_type,
                            elapsed_seconds=elapsed, **extra_fields)

    @abstractmethod
    def validate_url(self, url: str) -> bool:
        """
        Check if URL is valid for this scraper.

        Args:
            url: URL to validate

        Returns:
            True if valid, False otherwise
        """
        raise NotImplementedError

    @abstractmethod
    def extract(self, url: str) -> Dict:
        """
        Resolve a URL.

        Returns:
            Dictionary with extraction results:
            {
                'success': bool,
                'url': str,
                'target_url': str or None,
                'strategy': str or None,
                'extraction_method': str,
                'extraction_timestamp': str,
                'elapsed_seconds': float or None,
                'error': str or None,
                'error_type': str or None
            }
        """
        raise NotImplementedError

    def close(self):
        """Cleanup browser resources."""
        if self._context:
            try:
                self._context.close()
            except Exception as ctx_err:
                logger.warning(f"[{self.scraper_type}] Failed to close context: {ctx_err}")
            finally:
                self._context = None

        if self._browser:
            try:
                logger.debug(f"[{self.scraper_type}] Closing browser")
                self._browser.close()
            except Exception as browser_err:
                logger.warning(f"[{self.scraper_type}] Failed to close browser: {browser_err}")
            finally:
                self._browser = None

        if self._playwright:
            try:
                self._playwright.stop()
            except Exception as pw_err:
                logger.warning(f"[{self.scraper_type}] Failed to stop Playwright: {pw_err}")
            finally:
                self._playwright = None

        logger.debug(f"[{self.scraper_type}] Browser session closed")
