from __future__ import annotations

from html import escape

from wakeping.checks.results import AttemptResult, RunOutcome
from wakeping.models import CheckConfig


def format_attempt(result: AttemptResult, max_attempts: int, ts: str) -> str:
    parts = [
        f"attempt={result.attempt}/{max_attempts}",
        f"outcome={result.outcome}",
        f"duration_ms={result.duration_ms}",
    ]
    if result.status_code is not None:
        parts.append(f"http={result.status_code}")
    if not result.healthy:
        parts.append(f"error={result.message!r}")
    parts.append(f"ts={ts}")
    return " ".join(parts)


def format_summary(outcome: RunOutcome, max_attempts: int) -> str:
    status = "succeeded" if outcome.succeeded else "failed"
    line = (
        f"run={status} attempts={len(outcome.attempts)}/{max_attempts} "
        f"url={outcome.target_url or '-'}"
    )
    if outcome.final_error:
        line += f" final_error={outcome.final_error!r}"
    return f"{line} ts={outcome.finished_at}"


def render_status_page(config: CheckConfig, schedule: str, configured: bool) -> str:
    target = escape(config.target_base_url) if configured else "Not configured"

    # Page
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head><title>wake-ping</title></head>",
        "<body>",
        "<h1>wake-ping</h1>",
        "<p>Worker is running.</p>",
        "<ul>",
        f"<li>Target URL: <code>{target}</code></li>",
        f"<li>Health endpoint: <code>{escape(config.health_path)}</code></li>",
        f"<li>Timeout: {config.timeout_ms} ms, attempts: {config.max_attempts}</li>",
        f"<li>Schedule: {escape(schedule)}</li>",
        "</ul>",
    ]
    if configured:
        lines.append("<p>Configured and ready. Trigger a check with <a href=\"/ping\">/ping</a>.</p>")
    else:
        lines.append(
            "<p><strong>Setup required:</strong> set the TARGET_BASE_URL "
            "environment variable.</p>"
        )
    lines += [
        "<p><small><a href=\"/debug\">View resolved configuration</a></small></p>",
        "</body>",
        "</html>",
    ]
    return "\n".join(lines)
