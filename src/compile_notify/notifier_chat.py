from __future__ import annotations

from typing import Any, Mapping

import httpx

from compile_notify.errors import NotificationDeliveryError


def send_chat_message(
    webhook_url: str,
    payload: dict[str, Any],
    timeout_seconds: float = 20.0,
    params: Mapping[str, str] | None = None,
    *,
    client: httpx.Client | None = None,
) -> None:
    if not webhook_url:
        raise NotificationDeliveryError("chat webhook URL is not configured")
    try:
        if client is None:
            response = httpx.post(
                webhook_url,
                json=payload,
                params=dict(params or {}),
                timeout=timeout_seconds,
                follow_redirects=True,
            )
        else:
            response = client.post(webhook_url, json=payload, params=dict(params or {}))
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise NotificationDeliveryError(f"chat webhook delivery failed: {exc}") from exc
