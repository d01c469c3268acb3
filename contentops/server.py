"""
HTTP server for on-demand SEO checks.

Endpoints:
    POST /check   - Fetch a URL and score it: {"url", "keywords", "brandName"}
    GET  /health  - Liveness check

Configuration comes from SEO_AUDIT_* environment variables (see
contentops.seo_audit.config).
"""

import json
import logging
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from typing import Optional

from contentops.seo_audit import AuditConfig, SEOAnalyzer
from contentops.seo_audit.errors import FetchError, InvalidRequestError

logger = logging.getLogger("seo-checker")


# ─── HTTP Request Handler ─────────────────────────────────────────────

class Handler(BaseHTTPRequestHandler):
    server: "SEOCheckServer"

    def do_GET(self):
        if self.path == "/health":
            self._respond(200, {"status": "ok"})
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self):
        if self.path != "/check":
            self._respond(404, {"error": "not found"})
            return

        try:
            content_length = int(self.headers.get("Content-Length", 0))
            body = json.loads(self.rfile.read(content_length)) if content_length else {}
        except (ValueError, UnicodeDecodeError):
            self._respond(400, {"error": "Request body must be JSON"})
            return
        if not isinstance(body, dict):
            self._respond(400, {"error": "Request body must be a JSON object"})
            return

        try:
            result = self.server.analyzer.check_url(
                body.get("url"),
                body.get("keywords"),
                body.get("brandName") or "",
            )
        except (InvalidRequestError, FetchError) as e:
            self._respond(400, {"error": str(e)})
            return
        except Exception as e:
            logger.error(f"SEO check failed for {body.get('url')}: {e}", exc_info=True)
            self._respond(500, {"error": "Internal server error"})
            return

        self._respond(200, result.model_dump(mode="json", by_alias=True))

    def _respond(self, code: int, data: dict):
        payload = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(code)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        # Suppress default access logs, use our logger instead
        logger.debug(f"{self.address_string()} {format % args}")


class SEOCheckServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, config: AuditConfig, analyzer: Optional[SEOAnalyzer] = None):
        super().__init__((config.host, config.port), Handler)
        self.config = config
        self.analyzer = analyzer or SEOAnalyzer(config)


# ─── Main ─────────────────────────────────────────────────────────────

def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s"
    )
    config = AuditConfig.from_env()
    server = SEOCheckServer(config)
    logger.info(f"SEO checker listening on {config.host}:{server.server_address[1]}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
