"""
Tests for fetch_html() and SEOAnalyzer.check_url() over httpx.MockTransport.
No real network access.
"""

import httpx
import pytest

from contentops.seo_audit import AuditConfig, FetchError, InvalidRequestError, SEOAnalyzer
from contentops.seo_audit.fetcher import fetch_html


PAGE = "<html><head><title>Đà Nẵng</title></head><body><article><p>Đà Nẵng là thành phố</p></article></body></html>"


def make_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)


class TestFetchHtml:
    def test_sends_configured_headers(self):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, html=PAGE)

        body = fetch_html("https://x.com/a", client=make_client(handler))
        assert body == PAGE
        assert seen["user-agent"].startswith("Mozilla/5.0 (compatible; SEOChecker/1.0")
        assert seen["accept-language"].startswith("vi-VN")

    def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "https://x.com/new"})
            return httpx.Response(200, html=PAGE)

        assert fetch_html("https://x.com/old", client=make_client(handler)) == PAGE

    def test_non_2xx_raises(self):
        client = make_client(lambda request: httpx.Response(404, text="nope"))
        with pytest.raises(FetchError) as exc:
            fetch_html("https://x.com/missing", client=client)
        assert exc.value.status_code == 404

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(FetchError) as exc:
            fetch_html("https://x.com/a", client=make_client(handler))
        assert exc.value.status_code is None

    def test_oversized_body(self):
        config = AuditConfig(max_bytes=10)
        client = make_client(lambda request: httpx.Response(200, html=PAGE))
        with pytest.raises(FetchError):
            fetch_html("https://x.com/a", config=config, client=client)


class TestCheckUrl:
    def test_fetch_and_analyze(self):
        client = make_client(lambda request: httpx.Response(200, html=PAGE))
        result = SEOAnalyzer(client=client).check_url("https://x.com/a", ["đà nẵng"])
        assert result.url == "https://x.com/a"
        assert result.title == "Đà Nẵng"
        assert len(result.modules) == 18

    def test_validation_runs_before_fetch(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, html=PAGE)

        with pytest.raises(InvalidRequestError):
            SEOAnalyzer(client=make_client(handler)).check_url("https://x.com/a", [])
        assert calls == []


class TestConfig:
    def test_defaults(self):
        config = AuditConfig.from_env({})
        assert config.port == 8000
        assert config.headers["User-Agent"].startswith("Mozilla/5.0")

    def test_from_env(self):
        config = AuditConfig.from_env({
            "SEO_AUDIT_PORT": "9100",
            "SEO_AUDIT_TIMEOUT": "5",
            "SEO_AUDIT_USER_AGENT": "TestBot/1.0",
        })
        assert config.port == 9100
        assert config.timeout == 5.0
        assert config.user_agent == "TestBot/1.0"
