from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from compile_notify.actions_io import report_failure, set_action_output
from compile_notify.chat_cards import serialize_card_payload
from compile_notify.config import (
    RUN_REQUIRED_SETTINGS,
    assert_required_settings,
    load_settings,
    mask_url,
    missing_settings,
)
from compile_notify.errors import FatalRunError
from compile_notify.push_notice import build_push_notification, changed_files_from_steps
from compile_notify.runner import CHAT_MESSAGE_OUTPUT, deliver_notification, run_compile_check


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="compile-notify")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Compile the source file and post a chat card on failure")
    subparsers.add_parser("healthcheck", help="Validate config and source file readiness")

    push_parser = subparsers.add_parser(
        "push-notice",
        help="Build a chat card summarizing a push event",
    )
    push_parser.add_argument(
        "--event-path",
        type=Path,
        default=None,
        help="Path to the push event JSON (defaults to INPUT_EVENT or GITHUB_EVENT_PATH)",
    )
    push_parser.add_argument(
        "--changed-files",
        default=None,
        help="JSON list of changed files (defaults to INPUT_STEPS files output)",
    )
    push_parser.add_argument("--send", action="store_true", help="Also POST the card to the webhook")

    return parser


def _configure_logging() -> None:
    level_name = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _cmd_run() -> int:
    settings = load_settings()
    assert_required_settings(settings)
    try:
        result = run_compile_check(settings)
    except FatalRunError as exc:
        return report_failure(str(exc))

    print(
        "run summary:",
        f"compiled={result.compiled}",
        f"errors={result.error_count}",
        f"notification_attempted={result.notification_attempted}",
        f"notification_delivered={result.notification_delivered}",
    )

    if not result.compiled and settings.fail_on_compile_error:
        return report_failure(f"{settings.source_path} failed to compile ({result.error_count} error(s))")
    return 0


def _cmd_healthcheck() -> int:
    settings = load_settings()
    missing = missing_settings(settings, RUN_REQUIRED_SETTINGS)
    if missing:
        print("missing required env vars:", ", ".join(missing))
        return 1

    if not settings.source_path.is_file():
        print(f"source file not found: {settings.source_path}")
        return 1

    print(f"compile service: {settings.compiler_url} ({settings.compiler_method})")
    print(f"chat webhook: {mask_url(settings.chat_webhook_url)}")
    print("healthcheck passed")
    return 0


def _load_event(event_path: Path | None) -> dict:
    raw = os.environ.get("INPUT_EVENT", "").strip()
    if event_path is None and not raw:
        env_path = os.environ.get("GITHUB_EVENT_PATH", "").strip()
        event_path = Path(env_path) if env_path else None
    if event_path is not None:
        raw = event_path.read_text(encoding="utf-8")
    if not raw:
        raise ValueError("no push event given (set INPUT_EVENT or GITHUB_EVENT_PATH)")
    try:
        event = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"push event is not valid JSON: {exc}") from exc
    if not isinstance(event, dict):
        raise ValueError("push event must be a JSON object")
    return event


def _cmd_push_notice(args: argparse.Namespace) -> int:
    settings = load_settings()
    event = _load_event(args.event_path)
    try:
        if args.changed_files is not None:
            parsed = json.loads(args.changed_files)
            if not isinstance(parsed, list):
                raise ValueError("--changed-files must be a JSON list")
            changed_files = [str(item) for item in parsed]
        else:
            changed_files = changed_files_from_steps(os.environ.get("INPUT_STEPS", ""))
    except json.JSONDecodeError as exc:
        raise ValueError(f"changed files are not valid JSON: {exc}") from exc

    notification = build_push_notification(event, changed_files, tz=settings.tz)
    chat_message = serialize_card_payload(notification)
    if not set_action_output(settings.github_output_path, CHAT_MESSAGE_OUTPUT, chat_message):
        print(chat_message)

    if args.send:
        delivered = deliver_notification(settings, notification)
        print(f"push notice delivered={delivered}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging()

    try:
        if args.command == "run":
            return _cmd_run()
        if args.command == "healthcheck":
            return _cmd_healthcheck()
        if args.command == "push-notice":
            return _cmd_push_notice(args)
    except (ValueError, OSError) as exc:
        return report_failure(str(exc))

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
