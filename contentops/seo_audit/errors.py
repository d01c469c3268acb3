"""Exceptions raised by the SEO audit caller layer."""

from typing import Optional


class SEOAuditError(Exception):
    """Base class for audit failures the caller should report."""


class InvalidRequestError(SEOAuditError):
    """The request is missing a valid URL or a non-blank keyword."""


class FetchError(SEOAuditError):
    """The page could not be retrieved, or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
