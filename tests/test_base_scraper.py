"""Tests for the Playwright lifecycle in BaseScraper, with sync_playwright replaced."""
import pytest

from core.environment import RuntimeEnvironment
from scrapers import base_scraper
from scrapers.google_news_scraper import GoogleNewsScraper


class FakeBrowser:
    def __init__(self, close_error=None):
        self.context_options = []
        self.close_error = close_error
        self.closed = False

    def new_context(self, **options):
        self.context_options.append(options)
        return FakeContext()

    def close(self):
        self.closed = True
        if self.close_error:
            raise self.close_error


class FakeContext:
    def __init__(self, close_error=None):
        self.close_error = close_error
        self.closed = False

    def close(self):
        self.closed = True
        if self.close_error:
            raise self.close_error


class FakeChromium:
    def __init__(self, browser):
        self.browser = browser
        self.launches = []

    def launch(self, **kwargs):
        self.launches.append(kwargs)
        return self.browser


class FakePlaywright:
    def __init__(self, browser, stop_error=None):
        self.chromium = FakeChromium(browser)
        self.stop_error = stop_error
        self.stopped = False

    def stop(self):
        self.stopped = True
        if self.stop_error:
            raise self.stop_error


@pytest.fixture
def fake_playwright(monkeypatch):
    """Patch sync_playwright so start() hands back a FakePlaywright."""
    playwright = FakePlaywright(FakeBrowser())

    class Manager:
        def start(self):
            return playwright

    monkeypatch.setattr(base_scraper, 'sync_playwright', lambda: Manager())
    return playwright


def test_launch_defaults(resolver_config, environment, fake_playwright):
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)

    scraper._create_context()

    launch = fake_playwright.chromium.launches[0]
    assert launch['headless'] is True
    assert launch['args'] == ['--disable-blink-features=AutomationControlled', '--disable-gpu']
    assert launch['proxy'] is None


def test_launch_adds_serverless_flags(resolver_config, fake_playwright):
    environment = RuntimeEnvironment.detect(environ={'VERCEL': '1'})
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)

    scraper._create_context()

    args = fake_playwright.chromium.launches[0]['args']
    assert args[0] == '--disable-blink-features=AutomationControlled'
    for flag in ('--no-sandbox', '--disable-dev-shm-usage', '--single-process', '--no-zygote'):
        assert flag in args


def test_launch_with_proxy(make_config, environment, fake_playwright):
    config = make_config({
        'scrapers': {'googlenews': {'headless': False}},
        'browser': {
            'proxy': {
                'enabled': True,
                'server': 'http://proxy.internal:8080',
                'username': 'resolver',
                'password': 'secret',
                'bypass': ['localhost', '*.example.com'],
            }
        },
    })
    scraper = GoogleNewsScraper(config=config, environment=environment)

    scraper._create_context()

    launch = fake_playwright.chromium.launches[0]
    assert launch['headless'] is False
    assert '--disable-gpu' not in launch['args']
    assert launch['proxy'] == {
        'server': 'http://proxy.internal:8080',
        'username': 'resolver',
        'password': 'secret',
        'bypass': 'localhost,*.example.com',
    }


def test_disabled_proxy_is_not_passed(make_config, environment, fake_playwright):
    config = make_config({
        'browser': {'proxy': {'enabled': False, 'server': 'http://proxy.internal:8080'}},
    })
    scraper = GoogleNewsScraper(config=config, environment=environment)

    scraper._create_context()

    assert fake_playwright.chromium.launches[0]['proxy'] is None


def test_context_options_from_config(make_config, environment, fake_playwright):
    config = make_config({
        'scrapers': {
            'googlenews': {
                'user_agent': 'Mozilla/5.0 (resolver)',
                'viewport': {'width': '1024', 'height': 768},
                'ignore_https_errors': False,
            }
        },
    })
    scraper = GoogleNewsScraper(config=config, environment=environment)

    scraper._create_context()

    assert fake_playwright.chromium.browser.context_options == [{
        'viewport': {'width': 1024, 'height': 768},
        'ignore_https_errors': False,
        'user_agent': 'Mozilla/5.0 (resolver)',
    }]


def test_context_defaults_without_user_agent(resolver_config, environment, fake_playwright):
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)

    scraper._create_context()
    scraper._create_context()

    # One browser serves every context
    assert len(fake_playwright.chromium.launches) == 1
    options = fake_playwright.chromium.browser.context_options[0]
    assert options == {'viewport': {'width': 1280, 'height': 720}, 'ignore_https_errors': True}


def test_close_releases_everything(resolver_config, environment, fake_playwright):
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)
    scraper._context = scraper._create_context()

    scraper.close()

    assert fake_playwright.chromium.browser.closed
    assert fake_playwright.stopped
    assert scraper._context is None
    assert scraper._browser is None
    assert scraper._playwright is None


def test_close_survives_failures(resolver_config, environment, monkeypatch):
    browser = FakeBrowser(close_error=RuntimeError('browser gone'))
    playwright = FakePlaywright(browser, stop_error=RuntimeError('driver gone'))

    class Manager:
        def start(self):
            return playwright

    monkeypatch.setattr(base_scraper, 'sync_playwright', lambda: Manager())
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)
    scraper._create_context()
    context = FakeContext(close_error=RuntimeError('context gone'))
    scraper._context = context

    scraper.close()

    assert context.closed
    assert browser.closed
    assert playwright.stopped
    assert scraper._context is None
    assert scraper._browser is None
    assert scraper._playwright is None


def test_close_without_browser_is_noop(resolver_config, environment):
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)

    scraper.close()

    assert scraper._browser is None
