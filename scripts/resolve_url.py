"""Resolve Google News links in-process, without the HTTP server."""

import sys
import json
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import Config
from scrapers.google_news_scraper import GoogleNewsScraper
from loguru import logger


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Resolve Google News links to article URLs")
    parser.add_argument(
        "urls",
        nargs="+",
        help="One or more news.google.com URLs"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to config.yaml",
        default="config.yaml"
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log strategy details"
    )

    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    config = Config(args.config)
    results = []
    for url in args.urls:
        # A fresh scraper per URL: extract() closes its browser when done
        scraper = GoogleNewsScraper(config=config, headless=not args.headed)
        results.append(scraper.extract(url))

    print(json.dumps(results, ensure_ascii=False, indent=2))
    return 0 if all(r['success'] for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
