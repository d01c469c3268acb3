"""
Runtime configuration for the fetcher and the HTTP server.

Environment variables:
    SEO_AUDIT_HOST        - Interface to bind (default: 0.0.0.0)
    SEO_AUDIT_PORT        - Port to listen on (default: 8000)
    SEO_AUDIT_TIMEOUT     - Fetch timeout in seconds (default: 30)
    SEO_AUDIT_USER_AGENT  - User-Agent sent when fetching pages
    SEO_AUDIT_MAX_BYTES   - Largest response body accepted (default: 10 MB)
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SEOChecker/1.0; +https://banpham.com)"
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "vi-VN,vi;q=0.9,en-US;q=0.8,en;q=0.7"


class AuditConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=0, le=65535)
    timeout: float = Field(default=30.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Language": self.accept_language,
        }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuditConfig":
        """Build a config from SEO_AUDIT_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values = {}
        for field, var in (
            ("host", "SEO_AUDIT_HOST"),
            ("port", "SEO_AUDIT_PORT"),
            ("timeout", "SEO_AUDIT_TIMEOUT"),
            ("user_agent", "SEO_AUDIT_USER_AGENT"),
            ("max_bytes", "SEO_AUDIT_MAX_BYTES"),
        ):
            if env.get(var):
                values[field] = env[var]
        return cls(**values)
