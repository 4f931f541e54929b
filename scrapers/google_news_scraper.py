"""Resolve Google News links to the publisher's article URL with Playwright."""
import time
from typing import Dict, List, Optional
from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeoutError
from scrapers.base_scraper import BaseScraper
from scrapers.link_strategies import (
    DEFAULT_ARTICLE_SELECTORS,
    DEFAULT_CLICK_SELECTORS,
    StrategyContext,
    resolve_strategy_order,
    run_strategies,
)
from utils.url_tools import (
    DEFAULT_EXCLUDED_DOMAINS,
    GOOGLE_NEWS_HOST,
    is_external_article_url,
    is_google_news_url,
    normalize_input_url,
)

INVALID_URL_MESSAGE = 'Please enter a valid URL'
UNSUPPORTED_URL_MESSAGE = 'Only Google News URLs are supported'
NOT_FOUND_MESSAGE = 'Could not find a news article link on the page'


class GoogleNewsScraper(BaseScraper):
    """Find the outbound article behind a news.google.com link.

    One browser is launched per `extract()` call and closed before it returns.
    """

    def __init__(self, **kwargs):
        """Initialize Google News resolver."""
        super().__init__(**kwargs)
        cfg = self.scraper_config
        self.aggregator_host = cfg.get('aggregator_host', GOOGLE_NEWS_HOST)
        self.blocked_resource_types = list(cfg.get('blocked_resource_types', ['image', 'stylesheet', 'font', 'media']))
        self.excluded_domains = list(cfg.get('excluded_domains', DEFAULT_EXCLUDED_DOMAINS))
        self.article_selectors = list(cfg.get('article_selectors', DEFAULT_ARTICLE_SELECTORS))
        self.click_selectors = list(cfg.get('click_probe_selectors', DEFAULT_CLICK_SELECTORS))
        self.max_click_probes = int(cfg.get('max_click_probes', 5))
        self.click_settle_ms = int(cfg.get('click_settle_ms', 1000))
        self.redirect_wait_ms = int(kwargs.get('redirect_wait_ms', cfg.get('redirect_wait_ms', self.element_timeout)))
        self.strategies = resolve_strategy_order(cfg.get('strategies'))

    def validate_url(self, url: str) -> bool:
        """
        Check if URL points at the news aggregator.

        Args:
            url: URL to validate

        Returns:
            True if the aggregator host appears in the URL
        """
        return is_google_news_url(url, self.aggregator_host)

    def extract(self, url: str) -> Dict:
        """
        Resolve a Google News URL to the article URL.

        Navigates to the link, gives client-side redirects a chance to fire,
        then falls back to the strategy chain if the page is still on the
        aggregator.

        Args:
            url: Google News URL as typed by the user

        Returns:
            Dictionary with extraction results (see BaseScraper.extract)
        """
        start_time = time.time()

        try:
            url = normalize_input_url(url)
        except ValueError:
            return self._error_result(url, INVALID_URL_MESSAGE, error_type='validation', started_at=start_time)

        if not self.validate_url(url):
            return self._error_result(url, UNSUPPORTED_URL_MESSAGE, error_type='validation', started_at=start_time)

        try:
            self._context = self._create_context()
            page = self._context.new_page()
            captured_requests: List[str] = []
            self._install_request_hooks(page, captured_requests)

            logger.info(f"[{self.scraper_type}] Navigating to {url}")
            page.goto(url, wait_until='domcontentloaded', timeout=self.navigation_timeout)

            target_url = self._wait_for_redirect(page)
            if target_url:
                logger.info(f"[{self.scraper_type}] Already redirected to target site: {target_url}")
                return self._success_result(url, target_url, 'redirect', start_time)

            logger.info(f"[{self.scraper_type}] Still on {self.aggregator_host}, trying to extract article URL")
            ctx = StrategyContext(
                page=page,
                excluded_domains=self.excluded_domains,
                article_selectors=self.article_selectors,
                click_selectors=self.click_selectors,
                max_click_probes=self.max_click_probes,
                click_settle_ms=self.click_settle_ms,
                element_timeout=self.element_timeout,
                captured_requests=captured_requests,
            )
            found = run_strategies(ctx, self.strategies)
            if found:
                strategy, target_url = found
                logger.info(f"[{self.scraper_type}] Found article URL via {strategy}: {target_url}")
                return self._success_result(url, target_url, strategy, start_time)

            logger.warning(f"[{self.scraper_type}] No article link found for {url}")
            return self._error_result(url, NOT_FOUND_MESSAGE, error_type='not_found', started_at=start_time)

        except Exception as e:
            logger.error(f"[{self.scraper_type}] Error extracting URL: {e}")
            return self._error_result(url, f'Failed to extract target URL: {e}',
                                      error_type='failure', started_at=start_time)
        finally:
            self.close()

    def _success_result(self, url: str, target_url: str, strategy: str, started_at: float) -> Dict:
        elapsed = round(time.time() - started_at, 2)
        logger.info(f"[{self.scraper_type}] Resolution completed in {elapsed}s via {strategy}")
        return self._result(url, success=True, target_url=target_url,
                            strategy=strategy, elapsed_seconds=elapsed)

    def _install_request_hooks(self, page: Page, captured_requests: List[str]):
        """
        Abort heavy resources and remember every document request.

        Must run before navigation so redirects issued while loading are seen.
        """
        blocked = set(self.blocked_resource_types)

        def handle_route(route):
            if route.request.resource_type in blocked:
                route.abort()
            else:
                route.continue_()

        def record_request(request):
            if request.resource_type == 'document' or request.is_navigation_request():
                captured_requests.append(request.url)

        if blocked:
            page.route('**/*', handle_route)
        page.on('request', record_request)

    def _wait_for_redirect(self, page: Page) -> Optional[str]:
        """
        Return the article URL if the page has left (or leaves) the aggregator.

        A page sitting on another Google host (e.g. a consent screen) does not
        count as redirected.
        """
        if is_external_article_url(page.url, self.excluded_domains):
            return page.url
        if self.redirect_wait_ms <= 0:
            return None

        try:
            page.wait_for_url(
                lambda current: is_external_article_url(current, self.excluded_domains),
                timeout=self.redirect_wait_ms,
                wait_until='commit',
            )
        except PlaywrightTimeoutError:
            logger.debug(f"[{self.scraper_type}] No client-side redirect within {self.redirect_wait_ms}ms")
            return None
        return page.url
