from __future__ import annotations

import html
import json
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import quote

from compile_notify.config import Settings
from compile_notify.models import ChatNotification, ErrorEntry

NO_DETAILS_MESSAGE = "Compilation failed without error details."


def _repo_relative_path(source_path: str) -> str:
    parts = [part for part in PurePosixPath(source_path.replace("\\", "/")).parts if part not in (".", "/")]
    return "/".join(parts)


def build_source_line_url(
    server_url: str,
    repository: str,
    ref_name: str,
    source_path: str,
    line: int | None,
) -> str:
    path = quote(_repo_relative_path(source_path))
    url = f"{server_url.rstrip('/')}/{repository}/blob/{quote(ref_name, safe='/')}/{path}"
    if line is not None:
        url += f"#L{line}"
    return url


def build_raw_source_url(repository: str, ref_name: str, source_path: str) -> str:
    path = quote(_repo_relative_path(source_path))
    return f"https://raw.githubusercontent.com/{repository}/{quote(ref_name, safe='/')}/{path}"


def _format_entry(entry: ErrorEntry, link_url: str) -> str:
    message = html.escape(entry.message.rstrip("."), quote=False)
    if entry.line is None:
        lines = [f'<b><font color="red">{message}</font></b>']
    else:
        position = f"{entry.line}:{entry.column}" if entry.column is not None else str(entry.line)
        lines = [f'{html.escape(entry.input_name)}:{position}: <b><font color="red">{message}</font></b>']
    if entry.excerpt:
        lines.append(html.escape(entry.excerpt, quote=False))
    lines.append(f'<a href="{html.escape(link_url)}">View on GitHub</a>')
    return "\n".join(lines)


def render_error_body(entries: list[ErrorEntry], settings: Settings) -> str:
    if not entries:
        return NO_DETAILS_MESSAGE
    blocks = []
    for entry in entries:
        link = build_source_line_url(
            settings.github_server_url,
            settings.github_repository,
            settings.github_ref_name,
            settings.source_path.as_posix(),
            entry.line,
        )
        blocks.append(_format_entry(entry, link))
    return "\n\n".join(blocks)


def build_compile_failure_notification(entries: list[ErrorEntry], settings: Settings) -> ChatNotification:
    return ChatNotification(
        title=settings.card_title,
        body_text=render_error_body(entries, settings),
        image_url=settings.card_image_url or None,
    )


def _buttons_widget(links: tuple[tuple[str, str], ...]) -> dict[str, Any]:
    return {
        "buttons": [
            {"textButton": {"text": text, "onClick": {"openLink": {"url": url}}}}
            for text, url in links
        ]
    }


def build_card_payload(notification: ChatNotification) -> dict[str, Any]:
    header: dict[str, str] = {"title": notification.title}
    if notification.subtitle:
        header["subtitle"] = notification.subtitle
    if notification.header_image_url:
        header["imageUrl"] = notification.header_image_url
        if notification.header_image_style:
            header["imageStyle"] = notification.header_image_style

    widgets: list[dict[str, Any]] = []
    if notification.image_url:
        widgets.append({"image": {"imageUrl": notification.image_url}})
    widgets.append({"textParagraph": {"text": notification.body_text}})
    if notification.summary_links:
        widgets.append(_buttons_widget(notification.summary_links))
    if notification.details_heading:
        widgets.append({"textParagraph": {"text": notification.details_heading}})
    for label, content in notification.details:
        widgets.append(
            {"keyValue": {"topLabel": label, "content": content, "contentMultiline": "true"}}
        )
    if notification.links:
        widgets.append(_buttons_widget(notification.links))

    return {"cards": [{"header": header, "sections": [{"widgets": widgets}]}]}


def serialize_card_payload(notification: ChatNotification) -> str:
    return json.dumps(build_card_payload(notification), ensure_ascii=False)
