import json

import httpx
import pytest

from compile_notify.errors import NotificationDeliveryError
from compile_notify.notifier_chat import send_chat_message

WEBHOOK = "https://chat.googleapis.test/v1/spaces/AAAA/messages"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_posts_json_payload_with_secret_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "spaces/AAAA/messages/1"})

    payload = {"cards": [{"header": {"title": "t"}, "sections": [{"widgets": []}]}]}
    send_chat_message(WEBHOOK, payload, params={"key": "k", "token": "a=b"}, client=_client(handler))

    request = seen[0]
    assert request.method == "POST"
    assert request.url.params["key"] == "k"
    assert request.url.params["token"] == "a=b"
    assert json.loads(request.content) == payload


def test_non_ok_response_raises_delivery_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": "forbidden"})

    with pytest.raises(NotificationDeliveryError):
        send_chat_message(WEBHOOK, {"cards": []}, client=_client(handler))


def test_transport_error_raises_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NotificationDeliveryError, match="timed out"):
        send_chat_message(WEBHOOK, {"cards": []}, client=_client(handler))


def test_missing_webhook_url_raises_delivery_error() -> None:
    with pytest.raises(NotificationDeliveryError, match="not configured"):
        send_chat_message("", {"cards": []})
