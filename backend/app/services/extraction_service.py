"""
Extraction service: runs the Playwright resolver off the event loop.
"""
import asyncio
from typing import Callable, Dict, Optional

from loguru import logger

from core.config import Config
from scrapers.google_news_scraper import GoogleNewsScraper
from app.services.history_service import HistoryService


class ExtractionService:
    """Resolve Google News URLs for the API and record successes."""

    def __init__(
        self,
        config: Optional[Config] = None,
        history: Optional[HistoryService] = None,
        scraper_factory: Optional[Callable[[], GoogleNewsScraper]] = None,
    ):
        """
        Initialize extraction service.

        Args:
            config: Configuration object
            history: Recent extractions store (built from config if omitted)
            scraper_factory: Builds a fresh resolver per request
        """
        self.config = config or Config()
        if history is None:
            history_config = self.config.get_history_config()
            history = HistoryService(history_config['path'], history_config['max_entries'])
        self.history = history
        self._scraper_factory = scraper_factory or (lambda: GoogleNewsScraper(config=self.config))

    def _resolve(self, url: str) -> Dict:
        # Sync Playwright must own its thread; a new scraper means a new browser.
        scraper = self._scraper_factory()
        return scraper.extract(url)

    async def extract(self, url: str) -> Dict:
        """
        Resolve a URL in a worker thread.

        Returns:
            The resolver's result dictionary
        """
        result = await asyncio.to_thread(self._resolve, url)

        if result.get('success'):
            try:
                self.history.record(result['url'], result['target_url'])
            except Exception as e:
                logger.warning(f"Failed to record extraction history: {e}")
        else:
            logger.info(f"Extraction failed ({result.get('error_type')}): {result.get('error')}")

        return result
