"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages. Every
error body has the shape ``{"message": "...", "errors": {"field": ["msg", ...]}}``
with ``errors`` present only for validation and business-rule failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    Gracefully handles unparseable bodies and missing fields.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    errors = body.get("errors")
    if isinstance(errors, dict) and errors:
        parts = []
        for field, messages in errors.items():
            if isinstance(messages, list):
                messages = "; ".join(str(m) for m in messages)
            parts.append(f"{field}: {messages}")
        return " | ".join(parts)

    if "message" in body:
        return str(body["message"])

    # Unknown shape: stringify and truncate
    return str(body)[:300]
