# Scraper modules
from .google_news_scraper import GoogleNewsScraper

__all__ = [
    'GoogleNewsScraper',
]
