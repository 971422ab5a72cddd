from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Mapping

from compile_notify.actions_io import set_action_output
from compile_notify.chat_cards import (
    build_card_payload,
    build_compile_failure_notification,
    build_raw_source_url,
    serialize_card_payload,
)
from compile_notify.compiler_client import submit_compile_request
from compile_notify.config import Settings, mask_url
from compile_notify.error_parsing import extract_error_entries
from compile_notify.errors import FatalRunError, NotificationDeliveryError
from compile_notify.models import ChatNotification, CompileRequest, CompileResult, RunResult
from compile_notify.notifier_chat import send_chat_message

logger = logging.getLogger(__name__)

SourceReader = Callable[[Path], str]
Compiler = Callable[[CompileRequest, str, float], CompileResult]
Sender = Callable[[str, dict[str, Any], float, Mapping[str, str]], None]
OutputWriter = Callable[[Path | None, str, str], bool]

CHAT_MESSAGE_OUTPUT = "chat-msg"


def read_source_file(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def build_compile_request(settings: Settings, source_text: str) -> CompileRequest:
    source_url: str | None = None
    if settings.compiler_method == "get":
        source_url = settings.source_url or build_raw_source_url(
            settings.github_repository,
            settings.github_ref_name,
            settings.source_path.as_posix(),
        )
    return CompileRequest(
        source_text=None if source_url else source_text,
        source_url=source_url,
        compilation_level=settings.compilation_level,
        language_out=settings.language_out,
    )


def deliver_notification(
    settings: Settings,
    notification: ChatNotification,
    *,
    send_message: Sender = send_chat_message,
) -> bool:
    """POST a card to the webhook. Delivery problems are logged, never raised."""
    try:
        send_message(
            settings.chat_webhook_url,
            build_card_payload(notification),
            settings.request_timeout_seconds,
            settings.webhook_params,
        )
    except NotificationDeliveryError as exc:
        logger.warning("notification not delivered to %s: %s", mask_url(settings.chat_webhook_url), exc)
        return False
    except Exception:
        logger.exception("unexpected error while sending notification")
        return False
    logger.info("notification delivered to %s", mask_url(settings.chat_webhook_url))
    return True


def run_compile_check(
    settings: Settings,
    *,
    read_source: SourceReader = read_source_file,
    compile_source: Compiler = submit_compile_request,
    send_message: Sender = send_chat_message,
    write_output: OutputWriter = set_action_output,
) -> RunResult:
    try:
        source_text = read_source(settings.source_path)
    except Exception as exc:
        raise FatalRunError(f"cannot read {settings.source_path}: {exc}") from exc

    request = build_compile_request(settings, source_text)
    try:
        result = compile_source(request, settings.compiler_url, settings.request_timeout_seconds)
    except FatalRunError:
        raise
    except Exception as exc:
        raise FatalRunError(f"compile service call failed: {exc}") from exc

    if result.success:
        logger.info("%s compiled cleanly", settings.source_path)
        return RunResult(
            compiled=True,
            error_count=0,
            notification_attempted=False,
            notification_delivered=False,
            chat_message=None,
        )

    entries = extract_error_entries(result.error)
    logger.info("%s failed to compile with %d error(s)", settings.source_path, len(entries))

    notification = build_compile_failure_notification(entries, settings)
    chat_message = serialize_card_payload(notification)
    try:
        write_output(settings.github_output_path, CHAT_MESSAGE_OUTPUT, chat_message)
    except OSError as exc:
        logger.warning("could not write %s step output: %s", CHAT_MESSAGE_OUTPUT, exc)
    delivered = deliver_notification(settings, notification, send_message=send_message)

    return RunResult(
        compiled=False,
        error_count=len(entries),
        notification_attempted=True,
        notification_delivered=delivered,
        chat_message=chat_message,
    )
