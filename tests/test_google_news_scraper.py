"""Tests for the Google News resolver flow, with the browser replaced by fakes."""
import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from scrapers.google_news_scraper import GoogleNewsScraper
from tests.fakes import FakeBrowserContext, FakePage, FakeRequest, FakeRoute, GOOGLE_NEWS_URL


@pytest.fixture
def make_scraper(resolver_config, environment, monkeypatch):
    """Build a scraper whose browser context is a FakeBrowserContext around `page`."""
    def _make(page, config=None):
        scraper = GoogleNewsScraper(config=config or resolver_config, environment=environment)
        browser_context = FakeBrowserContext(page)
        monkeypatch.setattr(scraper, '_create_context', lambda: browser_context)
        return scraper, browser_context
    return _make


def test_rejects_invalid_url_without_browser(resolver_config, environment, monkeypatch):
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)
    monkeypatch.setattr(scraper, '_create_context', lambda: pytest.fail('browser launched'))

    result = scraper.extract('   not a url ')

    assert result['success'] is False
    assert result['error_type'] == 'validation'
    assert result['error'] == 'Please enter a valid URL'


def test_rejects_non_google_news_url(resolver_config, environment):
    scraper = GoogleNewsScraper(config=resolver_config, environment=environment)

    result = scraper.extract('https://www.example.com/story')

    assert result['error_type'] == 'validation'
    assert result['error'] == 'Only Google News URLs are supported'


def test_immediate_redirect(make_scraper):
    page = FakePage(landing_url='https://www.example.com/landed')
    scraper, browser_context = make_scraper(page)

    result = scraper.extract(f'  {GOOGLE_NEWS_URL}  ')

    assert result['success'] is True
    assert result['target_url'] == 'https://www.example.com/landed'
    assert result['strategy'] == 'redirect'
    assert result['url'] == GOOGLE_NEWS_URL
    assert page.goto_calls[0]['wait_until'] == 'domcontentloaded'
    assert page.goto_calls[0]['timeout'] == 20000
    assert browser_context.closed


def test_client_side_redirect_after_load(make_scraper):
    page = FakePage(redirect_to='https://www.example.com/js-redirect')
    scraper, _ = make_scraper(page)

    result = scraper.extract(GOOGLE_NEWS_URL)

    assert result['success'] is True
    assert result['target_url'] == 'https://www.example.com/js-redirect'
    assert result['strategy'] == 'redirect'


def test_consent_page_is_not_a_redirect(make_scraper):
    page = FakePage(
        landing_url='https://consent.google.com/ml?continue=https://news.google.com/articles/abc',
        attributes={('a[data-n-au]', 'data-n-au'): ['https://www.example.com/from-attr']},
    )
    scraper, _ = make_scraper(page)

    result = scraper.extract(GOOGLE_NEWS_URL)

    assert result['strategy'] == 'data_attributes'
    assert result['target_url'] == 'https://www.example.com/from-attr'


def test_falls_back_to_strategies(make_scraper):
    page = FakePage(attributes={
        ('a[href^="https://"]', 'href'): ['https://www.example.com/linked'],
    })
    scraper, browser_context = make_scraper(page)

    result = scraper.extract(GOOGLE_NEWS_URL)

    assert result['success'] is True
    assert result['strategy'] == 'external_links'
    assert result['target_url'] == 'https://www.example.com/linked'
    assert result['error'] is None
    assert browser_context.closed


def test_network_requests_are_captured_during_navigation(make_scraper):
    page = FakePage(requests_on_goto=[
        FakeRequest(GOOGLE_NEWS_URL),
        FakeRequest('https://www.example.com/pixel.gif', resource_type='image'),
        FakeRequest('https://www.example.com/article', resource_type='other', navigation=True),
    ])
    scraper, _ = make_scraper(page)

    result = scraper.extract(GOOGLE_NEWS_URL)

    assert result['strategy'] == 'network_requests'
    assert result['target_url'] == 'https://www.example.com/article'


def test_not_found(make_scraper):
    scraper, browser_context = make_scraper(FakePage())

    result = scraper.extract(GOOGLE_NEWS_URL)

    assert result['success'] is False
    assert result['error_type'] == 'not_found'
    assert result['error'] == 'Could not find a news article link on the page'
    assert browser_context.closed


def test_navigation_failure(make_scraper):
    page = FakePage(goto_error=PlaywrightTimeoutError('Timeout 20000ms exceeded.'))
    scraper, browser_context = make_scraper(page)

    result = scraper.extract(GOOGLE_NEWS_URL)

    assert result['success'] is False
    assert result['error_type'] == 'failure'
    assert result['error'].startswith('Failed to extract target URL: ')
    assert 'Timeout 20000ms exceeded.' in result['error']
    assert browser_context.closed


def test_blocked_resources_are_aborted(make_scraper):
    page = FakePage(landing_url='https://www.example.com/landed')
    scraper, _ = make_scraper(page)
    scraper.extract(GOOGLE_NEWS_URL)

    pattern, handler = page.routes[0]
    assert pattern == '**/*'

    outcomes = {}
    for resource_type in ('image', 'stylesheet', 'font', 'media', 'document', 'script'):
        route = FakeRoute(FakeRequest('https://www.example.com/r', resource_type=resource_type))
        handler(route)
        outcomes[resource_type] = route.outcome

    assert outcomes == {
        'image': 'aborted',
        'stylesheet': 'aborted',
        'font': 'aborted',
        'media': 'aborted',
        'document': 'continued',
        'script': 'continued',
    }


def test_configured_strategy_order(make_config, environment, make_scraper):
    config = make_config({'scrapers': {'googlenews': {
        'strategies': ['external_links', 'data_attributes'],
        'redirect_wait_ms': 0,
    }}})
    page = FakePage(attributes={
        ('a[data-n-au]', 'data-n-au'): ['https://www.example.com/attr'],
        ('a[href^="https://"]', 'href'): ['https://www.example.com/link'],
    })
    scraper, _ = make_scraper(page, config=config)

    result = scraper.extract(GOOGLE_NEWS_URL)

    assert result['strategy'] == 'external_links'


def test_unknown_strategy_in_config(make_config, environment):
    config = make_config({'scrapers': {'googlenews': {'strategies': ['meta_tags', 'guess']}}})

    with pytest.raises(ValueError, match='guess'):
        GoogleNewsScraper(config=config, environment=environment)


def test_serverless_timeouts_used(resolver_config):
    from core.environment import RuntimeEnvironment

    scraper = GoogleNewsScraper(config=resolver_config, environment=RuntimeEnvironment.detect(environ={'VERCEL': '1'}))

    assert scraper.navigation_timeout == 15000
    assert scraper.element_timeout == 3000
