from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

NTFY_BASE_URL = "https://ntfy.sh"


def build_topic_url(topic: str, base_url: str = NTFY_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{topic}"


def send_ntfy_message(
    *,
    topic: str,
    text: str,
    base_url: str = NTFY_BASE_URL,
    timeout_seconds: float = 20.0,
    transport: httpx.BaseTransport | None = None,
) -> None:
    # Fire-and-forget: a relay outage must not stop polling, so failures are only logged.
    url = build_topic_url(topic, base_url)
    try:
        with httpx.Client(timeout=timeout_seconds, transport=transport) as client:
            r = client.post(
                url,
                content=text.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
            )
            r.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Failed to send ntfy notification to %s (%s: %s)", url, type(e).__name__, e)
