"""
SEOAnalyzer: main orchestrator for single-page SEO checks.

analyze_html() is the pure core: HTML + keywords in, scored report out.
check_url() wraps it with request validation and page retrieval.
"""

import logging
from typing import List, Optional
from urllib.parse import urlparse

import httpx

from .checks import evaluate
from .config import AuditConfig
from .errors import InvalidRequestError
from .fetcher import fetch_html
from .models import CheckRequest, SEOCheckResult
from .parser import extract

logger = logging.getLogger(__name__)


class SEOAnalyzer:
    """
    Scores one page against the content team's on-page checklist.

    Usage, HTML already in hand:
        analyzer = SEOAnalyzer()
        result = analyzer.analyze_html(url, html, ["đà nẵng"], brand_name="BanPham")

    Usage, fetch and score:
        result = analyzer.check_url("https://example.com/post", ["đà nẵng"])
    """

    def __init__(self, config: Optional[AuditConfig] = None, client: Optional[httpx.Client] = None):
        self.config = config or AuditConfig()
        self.client = client

    def analyze_html(
        self,
        url: str,
        html: str,
        keywords: List[str],
        brand_name: str = "",
    ) -> SEOCheckResult:
        """
        Run all SEO modules on an already-fetched page.

        Args:
            url: The URL the HTML was retrieved from.
            html: Raw response body.
            keywords: Target keywords; the first non-blank one is primary.
            brand_name: Brand to look for, empty to skip brand checks.

        Returns:
            SEOCheckResult with per-module scores and the grand total.
        """
        page = extract(html, url)
        modules = evaluate(page, keywords, brand_name)

        result = SEOCheckResult(
            url=url,
            title=page.title,
            word_count=page.word_count,
            article_type=page.article_type,
            total_score=sum(m.score for m in modules),
            max_score=sum(m.max_score for m in modules),
            modules=modules,
        )
        logger.info(
            f"Checked {url} ({page.article_type.value}, {page.word_count} words): "
            f"{result.total_score}/{result.max_score}"
        )
        return result

    def check_url(
        self,
        url: str,
        keywords: List[str],
        brand_name: str = "",
    ) -> SEOCheckResult:
        """
        Validate the request, fetch the page, then analyze it.

        Raises:
            InvalidRequestError: Missing/invalid URL or no non-blank keyword.
            FetchError: The page could not be retrieved.
        """
        request = self.validate(url, keywords, brand_name)
        html = fetch_html(request.url, config=self.config, client=self.client)
        return self.analyze_html(request.url, html, request.keywords, request.brand_name)

    @staticmethod
    def validate(url: str, keywords: List[str], brand_name: str = "") -> CheckRequest:
        """Normalize caller input into a CheckRequest or raise InvalidRequestError."""
        url = (url or "").strip() if isinstance(url, str) else ""
        if not url:
            raise InvalidRequestError("URL and keywords are required")

        try:
            parsed = urlparse(url)
        except ValueError:
            raise InvalidRequestError(f"Invalid URL: {url}")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidRequestError(f"Invalid URL: {url}")

        if not isinstance(keywords, list):
            raise InvalidRequestError("URL and keywords are required")
        cleaned = [k.strip() for k in keywords if isinstance(k, str) and k.strip()]
        if not cleaned:
            raise InvalidRequestError("URL and keywords are required")

        return CheckRequest(
            url=url,
            keywords=cleaned,
            brand_name=(brand_name or "").strip() if isinstance(brand_name, str) else "",
        )
