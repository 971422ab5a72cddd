from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from compile_notify.errors import FatalRunError
from compile_notify.models import CompileRequest, CompileResult

logger = logging.getLogger(__name__)


def _send(client: httpx.Client, request: CompileRequest, endpoint: str) -> httpx.Response:
    if request.source_url:
        return client.get(
            endpoint,
            params={
                "code_url": request.source_url,
                "compilation_level": request.compilation_level,
                "language_out": request.language_out,
            },
        )
    return client.post(
        endpoint,
        content=(request.source_text or "").encode("utf-8"),
        headers={"Content-Type": "text/plain; charset=utf-8"},
    )


def submit_compile_request(
    request: CompileRequest,
    endpoint: str,
    timeout_seconds: float = 20.0,
    *,
    client: httpx.Client | None = None,
) -> CompileResult:
    """Send the source (or a URL to it) to the compile service and parse its verdict."""
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)
    try:
        logger.info("submitting source to compile service %s via %s", endpoint, request.method)
        response = _send(http, request, endpoint)
        response.raise_for_status()
        return CompileResult.model_validate(response.json())
    except httpx.HTTPError as exc:
        raise FatalRunError(f"compile service request failed: {exc}") from exc
    except (ValueError, ValidationError) as exc:
        raise FatalRunError(f"compile service returned an unexpected response: {exc}") from exc
    finally:
        if owns_client:
            http.close()
