import asyncio
import json
import os
import unittest
from unittest.mock import AsyncMock, patch

from wakeping.checks.http_check import HttpProbeResponse
from wakeping.main import app

HEALTHY = HttpProbeResponse(
    status_code=200, reason="OK", content_type="text/plain", body="OK"
)
UNAVAILABLE = HttpProbeResponse(
    status_code=502, reason="Bad Gateway", content_type="text/html", body=""
)
CONFIGURED_ENV = {
    "TARGET_BASE_URL": "http://example.local",
    "HEALTH_ENDPOINT": "/healthz",
    "TIMEOUT_MS": "1000",
    "RETRY_ATTEMPTS": "2",
}


def _asgi_request(method: str, path: str) -> tuple[int, dict[str, str], bytes]:
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": b"",
        "headers": [(b"host", b"testserver")],
        "client": ("127.0.0.1", 12345),
        "server": ("testserver", 80),
    }
    sent_messages: list[dict] = []
    received = False

    async def receive():
        nonlocal received
        if received:
            return {"type": "http.disconnect"}
        received = True
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        sent_messages.append(message)

    asyncio.run(app(scope, receive, send))
    status = 500
    headers: dict[str, str] = {}
    body = b""
    for message in sent_messages:
        if message["type"] == "http.response.start":
            status = message["status"]
            headers = {k.decode(): v.decode() for k, v in message.get("headers", [])}
        if message["type"] == "http.response.body":
            body += message.get("body", b"")
    return status, headers, body


class PingEndpointTests(unittest.TestCase):
    def test_successful_check_returns_200(self) -> None:
        for method in ("GET", "POST"):
            with self.subTest(method=method):
                with patch.dict(os.environ, CONFIGURED_ENV), patch(
                    "wakeping.runner.fetch_health", return_value=HEALTHY
                ):
                    status, _, body = _asgi_request(method, "/ping")

                payload = json.loads(body)
                self.assertEqual(status, 200)
                self.assertTrue(payload["success"])
                self.assertIn("attempt 1", payload["message"])
                self.assertNotIn("error", payload)
                self.assertTrue(payload["timestamp"].endswith("Z"))

    def test_failed_check_returns_500_with_error(self) -> None:
        with patch.dict(os.environ, CONFIGURED_ENV), patch(
            "wakeping.runner.fetch_health", return_value=UNAVAILABLE
        ) as fetch, patch("wakeping.runner.sleep", new_callable=AsyncMock):
            status, _, body = _asgi_request("POST", "/ping")

        payload = json.loads(body)
        self.assertEqual(status, 500)
        self.assertFalse(payload["success"])
        self.assertEqual(payload["error"], "HTTP 502: Bad Gateway")
        self.assertEqual(fetch.call_count, 2)

    def test_unconfigured_target_returns_500_without_request(self) -> None:
        with patch.dict(os.environ, {"TARGET_BASE_URL": ""}), patch(
            "wakeping.runner.fetch_health"
        ) as fetch:
            status, _, body = _asgi_request("GET", "/ping")

        payload = json.loads(body)
        self.assertEqual(status, 500)
        self.assertIn("TARGET_BASE_URL", payload["error"])
        fetch.assert_not_called()


class SystemEndpointTests(unittest.TestCase):
    def test_debug_reports_raw_and_resolved_config(self) -> None:
        env = {"TARGET_BASE_URL": "http://example.local", "HEALTH_ENDPOINT": "/hz"}
        with patch.dict(os.environ, env):
            os.environ.pop("TIMEOUT_MS", None)
            status, _, body = _asgi_request("GET", "/debug")

        payload = json.loads(body)
        self.assertEqual(status, 200)
        self.assertEqual(payload["environment_variables"]["HEALTH_ENDPOINT"], "/hz")
        self.assertEqual(
            payload["environment_variables"]["TIMEOUT_MS"], "NOT SET (default: 30000)"
        )
        self.assertEqual(payload["resolved"]["target_url"], "http://example.local/hz")
        self.assertTrue(payload["resolved"]["configured"])
        self.assertIn("Every 14 minutes", payload["schedule"])

    def test_status_page_flags_missing_target(self) -> None:
        with patch.dict(os.environ, {"TARGET_BASE_URL": ""}):
            status, headers, body = _asgi_request("GET", "/status")

        self.assertEqual(status, 200)
        self.assertTrue(headers["content-type"].startswith("text/html"))
        self.assertIn(b"Not configured", body)
        self.assertIn(b"Setup required", body)

    def test_root_serves_status_page(self) -> None:
        with patch.dict(os.environ, CONFIGURED_ENV):
            status, _, body = _asgi_request("GET", "/")

        self.assertEqual(status, 200)
        self.assertIn(b"http://example.local", body)

    def test_unknown_path_is_404(self) -> None:
        status, _, _ = _asgi_request("GET", "/favicon.ico")
        self.assertEqual(status, 404)

    def test_openapi_schema_generation(self) -> None:
        schema = app.openapi()

        paths = schema["paths"]
        self.assertIn("/ping", paths)
        self.assertIn("get", paths["/ping"])
        self.assertIn("post", paths["/ping"])
        self.assertIn("/debug", paths)
        self.assertIn("/health", paths)


if __name__ == "__main__":
    unittest.main()
