from __future__ import annotations

import json
import time
from dataclasses import dataclass

import requests

from wakeping.checks.results import AttemptResult

USER_AGENT = "wake-ping/1.0"
REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
}
OBSERVED_SNIPPET_CHARS = 120
# One-byte reads: the deadline is checked after every byte received.
READ_CHUNK_BYTES = 1
MAX_BODY_BYTES = 16384


@dataclass
class HttpProbeResponse:
    status_code: int
    reason: str
    content_type: str
    body: str


def _read_body(r: requests.Response, deadline: float, timeout_s: float) -> str:
    buf = bytearray()
    for chunk in r.iter_content(chunk_size=READ_CHUNK_BYTES):
        if time.perf_counter() > deadline:
            raise requests.ReadTimeout(f"Response body not received within {timeout_s}s")
        buf.extend(chunk)
        if len(buf) >= MAX_BODY_BYTES:
            break
    return bytes(buf[:MAX_BODY_BYTES]).decode(r.encoding or "utf-8", errors="replace")


def fetch_health(url: str, timeout_s: float, deadline: float | None = None) -> HttpProbeResponse:
    """Issue the GET on a fresh session and read the body before `deadline`.

    `deadline` is a `time.perf_counter()` value; it defaults to `timeout_s`
    from now. Bodies larger than MAX_BODY_BYTES are truncated. Raises
    requests exceptions unchanged; the runner classifies them.
    """
    if deadline is None:
        deadline = time.perf_counter() + timeout_s
    with requests.Session() as session:
        r = session.get(
            url,
            headers=REQUEST_HEADERS,
            timeout=(timeout_s, timeout_s),
            stream=True,
        )
        try:
            return HttpProbeResponse(
                status_code=r.status_code,
                reason=r.reason or "",
                content_type=r.headers.get("content-type") or "",
                body=_read_body(r, deadline, timeout_s),
            )
        finally:
            r.close()


def is_json_content_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def _snippet(text: str) -> str:
    text = text.strip().replace("\n", "\\n")
    if len(text) > OBSERVED_SNIPPET_CHARS:
        return text[:OBSERVED_SNIPPET_CHARS] + "..."
    return text


def _classify_text(body: str) -> tuple[bool, str]:
    if "ok" in body.lower():
        return True, "ok"
    return False, _snippet(body) or "unknown"


def observe_status(resp: HttpProbeResponse) -> tuple[bool, str]:
    """Return (healthy, observed status) for a 2xx response."""
    if not is_json_content_type(resp.content_type):
        return _classify_text(resp.body)

    try:
        payload = json.loads(resp.body)
    except (ValueError, RecursionError):
        return False, "unknown"

    if isinstance(payload, str):
        return _classify_text(payload)
    if not isinstance(payload, dict):
        return False, "unknown"

    status = payload.get("status")
    if status is None:
        return False, "unknown"
    return status == "ok", str(status)


def classify_response(
    resp: HttpProbeResponse, attempt: int, duration_ms: int
) -> AttemptResult:
    if not 200 <= resp.status_code < 300:
        return AttemptResult(
            attempt=attempt,
            duration_ms=duration_ms,
            outcome="http_error",
            status_code=resp.status_code,
            detail=resp.reason or None,
        )

    healthy, observed = observe_status(resp)
    return AttemptResult(
        attempt=attempt,
        duration_ms=duration_ms,
        outcome="healthy" if healthy else "unhealthy_status",
        status_code=resp.status_code,
        detail=observed,
    )
