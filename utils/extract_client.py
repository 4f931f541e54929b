"""Client for the /api/extract endpoint.

Usage examples:

  # Resolve one link against a local server
  python -m utils.extract_client "https://news.google.com/articles/CBMi..."

  # Point at another deployment
  python -m utils.extract_client --api-base https://resolver.example.org "https://news.google.com/..."

Prints the article URL on stdout; errors go to stderr with exit code 1.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

import requests

from utils.url_tools import is_google_news_url, normalize_input_url

DEFAULT_API_BASE = "http://localhost:3001"


class ExtractionClientError(Exception):
    """Raised when a link could not be resolved through the API."""


def _post(http: requests.Session, api_base: str, url: str, timeout: float) -> requests.Response:
    return http.post(
        f"{api_base.rstrip('/')}/api/extract",
        json={"url": url},
        headers={"Cache-Control": "no-store"},
        timeout=timeout,
    )


def extract_target_url(
    google_news_url: str,
    api_base: str = DEFAULT_API_BASE,
    session: Optional[requests.Session] = None,
    timeout: float = 60.0,
) -> str:
    """
    Ask the extraction service for the article URL behind a Google News link.

    The input is checked locally first so obviously bad links never reach the
    server.

    Args:
        google_news_url: Link as pasted by the user
        api_base: Base URL of the backend
        session: Optional requests session (reused connections, testing)
        timeout: Request timeout in seconds

    Returns:
        The resolved article URL

    Raises:
        ExtractionClientError: with a user-facing message
    """
    try:
        url = normalize_input_url(google_news_url)
    except ValueError as exc:
        raise ExtractionClientError(str(exc)) from exc

    if not is_google_news_url(url):
        raise ExtractionClientError("Please enter a valid Google News URL")

    try:
        if session is not None:
            response = _post(session, api_base, url, timeout)
        else:
            with requests.Session() as http:
                response = _post(http, api_base, url, timeout)
    except requests.RequestException as exc:
        raise ExtractionClientError("Network error - unable to connect to extraction service") from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise ExtractionClientError(f"Invalid response from server: {response.reason}") from exc

    if not response.ok:
        message = data.get("message") if isinstance(data, dict) else None
        raise ExtractionClientError(message or f"Error {response.status_code}: {response.reason}")

    target_url = data.get("targetUrl") if isinstance(data, dict) else None
    if not target_url:
        raise ExtractionClientError("No target URL was found in this Google News link")

    return target_url


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Resolve a Google News link through the extraction API")
    parser.add_argument("url", help="Google News URL")
    parser.add_argument("--api-base", default=DEFAULT_API_BASE, help="Backend base URL")
    parser.add_argument("--timeout", type=float, default=60.0, help="Request timeout in seconds")
    args = parser.parse_args(argv)

    try:
        print(extract_target_url(args.url, api_base=args.api_base, timeout=args.timeout))
    except ExtractionClientError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
