"""
contentops.seo_audit: on-page SEO checks for editorial content.

Usage:
    from contentops.seo_audit import SEOAnalyzer

    analyzer = SEOAnalyzer()

    # Fetch and score a published page
    result = analyzer.check_url(url, ["đà nẵng", "bãi biển"], brand_name="BanPham")

    # Score HTML already in hand (no network)
    result = analyzer.analyze_html(url, html, ["đà nẵng"])

    result.model_dump(by_alias=True)   # dashboard JSON
"""

from .analyzer import SEOAnalyzer
from .checks import evaluate, MODULES
from .config import AuditConfig
from .errors import SEOAuditError, InvalidRequestError, FetchError
from .parser import extract, detect_article_type
from .models import (
    ArticleType,
    CheckStatus,
    Check,
    CheckRequest,
    ImageData,
    LinkData,
    ListData,
    Module,
    PageData,
    SchemaData,
    SEOCheckResult,
)

__all__ = [
    # Main entry points
    "SEOAnalyzer",
    "extract",
    "evaluate",
    "detect_article_type",
    "MODULES",
    "AuditConfig",
    # Errors
    "SEOAuditError",
    "InvalidRequestError",
    "FetchError",
    # Enums
    "ArticleType",
    "CheckStatus",
    # Page structure
    "PageData",
    "ImageData",
    "LinkData",
    "ListData",
    "SchemaData",
    # Report
    "Check",
    "Module",
    "SEOCheckResult",
    "CheckRequest",
]
