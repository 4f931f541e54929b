"""Ordered heuristics for finding the outbound article link on a Google News page.

Each strategy takes a `StrategyContext` and returns the article URL or None.
Strategies only read from the page, except `click_probe`, which clicks
elements and watches where the browser goes.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from loguru import logger
from playwright.sync_api import Page, Error as PlaywrightError
from utils.url_tools import (
    DEFAULT_EXCLUDED_DOMAINS,
    first_external_url,
    is_external_article_url,
    parse_meta_refresh,
)

ATTRIBUTE_VALUES_JS = "(els, name) => els.map(e => e.getAttribute(name))"
TEXT_VALUES_JS = "els => els.map(e => (e.innerText || e.textContent || '').trim())"

DEFAULT_ARTICLE_SELECTORS = [
    '.VDXfz a',
    '.DY5T1d',
    '.RZIKme',
    'article a',
    'a[aria-label*="article"]',
    'h3 > a',
    'h4 > a',
]

DEFAULT_CLICK_SELECTORS = [
    'article a',
    'c-wiz a[jsname]',
    'a[role="link"]',
    '[role="button"]',
]


@dataclass
class StrategyContext:
    """Everything a strategy may look at."""
    page: Page
    excluded_domains: Sequence[str] = DEFAULT_EXCLUDED_DOMAINS
    article_selectors: Sequence[str] = field(default_factory=lambda: list(DEFAULT_ARTICLE_SELECTORS))
    click_selectors: Sequence[str] = field(default_factory=lambda: list(DEFAULT_CLICK_SELECTORS))
    max_click_probes: int = 5
    click_settle_ms: int = 1000
    element_timeout: int = 5000
    # Document/navigation request URLs seen since the page was opened
    captured_requests: List[str] = field(default_factory=list)


Strategy = Callable[[StrategyContext], Optional[str]]


def _attribute_values(page: Page, selector: str, name: str) -> List[Optional[str]]:
    return page.eval_on_selector_all(selector, ATTRIBUTE_VALUES_JS, name) or []


def from_meta_tags(ctx: StrategyContext) -> Optional[str]:
    """og:url / twitter:url / canonical link, then a meta refresh target."""
    page = ctx.page
    candidates = []
    candidates += _attribute_values(page, 'meta[property="og:url"]', 'content')
    candidates += _attribute_values(page, 'meta[name="twitter:url"]', 'content')
    candidates += _attribute_values(page, 'link[rel="canonical"]', 'href')
    refresh_values = _attribute_values(page, 'meta[http-equiv="refresh" i]', 'content')
    candidates += [parse_meta_refresh(value) for value in refresh_values]
    return first_external_url(candidates, ctx.excluded_domains)


def from_data_attributes(ctx: StrategyContext) -> Optional[str]:
    """Google News stores the publisher URL in data-n-au on article anchors."""
    values = _attribute_values(ctx.page, 'a[data-n-au]', 'data-n-au')
    return first_external_url(values, ctx.excluded_domains)


def from_external_links(ctx: StrategyContext) -> Optional[str]:
    values = _attribute_values(ctx.page, 'a[href^="https://"]', 'href')
    return first_external_url(values, ctx.excluded_domains)


def from_article_elements(ctx: StrategyContext) -> Optional[str]:
    """Walk the known article containers in order; first selector with a hit wins."""
    for selector in ctx.article_selectors:
        url = first_external_url(_attribute_values(ctx.page, selector, 'href'), ctx.excluded_domains)
        if url:
            return url
    return None


def from_link_text(ctx: StrategyContext) -> Optional[str]:
    """Anchors whose visible text is itself a URL."""
    texts = ctx.page.eval_on_selector_all('a', TEXT_VALUES_JS) or []
    candidates = [text for text in texts if text and text.startswith(('http://', 'https://'))]
    return first_external_url(candidates, ctx.excluded_domains)


def _url_of_new_page(new_page, timeout: int) -> str:
    try:
        new_page.wait_for_load_state('domcontentloaded', timeout=timeout)
    except PlaywrightError as e:
        logger.debug(f"[googlenews] Popup did not finish loading: {e}")
    return new_page.url


def probe_clickable_elements(ctx: StrategyContext) -> Optional[str]:
    """
    Click candidate elements and see whether a popup or the page itself lands
    on an external site.

    At most `max_click_probes` elements are clicked across all selectors.
    Popups opened by a click are closed after their URL has been read.
    """
    page = ctx.page
    browser_context = page.context
    probes = 0

    for selector in ctx.click_selectors:
        for handle in page.query_selector_all(selector):
            if probes >= ctx.max_click_probes:
                return None
            probes += 1

            pages_before = list(browser_context.pages)
            try:
                handle.click(timeout=ctx.element_timeout)
                page.wait_for_timeout(ctx.click_settle_ms)
            except PlaywrightError as e:
                logger.debug(f"[googlenews] Click on '{selector}' failed: {e}")
                continue

            for opened in [p for p in browser_context.pages if p not in pages_before]:
                opened_url = _url_of_new_page(opened, ctx.element_timeout)
                try:
                    opened.close()
                except PlaywrightError:
                    logger.debug("[googlenews] Popup already closed")
                if is_external_article_url(opened_url, ctx.excluded_domains):
                    return opened_url

            if is_external_article_url(page.url, ctx.excluded_domains):
                return page.url

    return None


def from_network_requests(ctx: StrategyContext) -> Optional[str]:
    return first_external_url(ctx.captured_requests, ctx.excluded_domains)


STRATEGIES: Dict[str, Strategy] = {
    'meta_tags': from_meta_tags,
    'data_attributes': from_data_attributes,
    'external_links': from_external_links,
    'article_elements': from_article_elements,
    'link_text': from_link_text,
    'click_probe': probe_clickable_elements,
    'network_requests': from_network_requests,
}


def resolve_strategy_order(names: Optional[Sequence[str]] = None) -> List[Tuple[str, Strategy]]:
    """
    Turn configured strategy names into (name, function) pairs.

    Args:
        names: Strategy names in the order to try them; all strategies if None

    Raises:
        ValueError: on an unknown strategy name
    """
    if names is None:
        return list(STRATEGIES.items())
    unknown = [name for name in names if name not in STRATEGIES]
    if unknown:
        raise ValueError(f"Unknown link strategies: {', '.join(unknown)}")
    return [(name, STRATEGIES[name]) for name in names]


def run_strategies(ctx: StrategyContext,
                   strategies: Sequence[Tuple[str, Strategy]]) -> Optional[Tuple[str, str]]:
    """
    Try each strategy in order.

    Returns:
        (strategy name, article URL) for the first hit, or None
    """
    for name, strategy in strategies:
        try:
            url = strategy(ctx)
        except Exception as e:
            logger.warning(f"[googlenews] Strategy '{name}' failed: {e}")
            continue
        if url:
            return name, url
        logger.debug(f"[googlenews] Strategy '{name}' found nothing")
    return None
