from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from compile_notify.models import ChatNotification

GIT_ICON_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/3/3f/Git_icon.svg/1024px-Git_icon.svg.png"
)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def format_short_timestamp(raw: str, tz: str = "America/Los_Angeles") -> str:
    """``2026-02-19T00:00:00Z`` -> ``2/18/26, 4:00 PM`` in the given zone."""
    try:
        moment = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        moment = moment.astimezone(ZoneInfo(tz))
    except (ZoneInfoNotFoundError, ValueError):
        pass
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.month}/{moment.day}/{moment:%y}, {hour}:{moment:%M} {meridiem}"


def _unique_committers(commits: list[Mapping[str, Any]]) -> list[str]:
    names: list[str] = []
    for commit in commits:
        name = str((commit.get("committer") or {}).get("name", "")).strip()
        if name and name not in names:
            names.append(name)
    return names


def build_push_notification(
    event: Mapping[str, Any],
    changed_files: list[str],
    *,
    tz: str = "America/Los_Angeles",
) -> ChatNotification:
    if not isinstance(event, Mapping):
        raise ValueError("push event must be a JSON object")
    commits = list(event.get("commits") or [])
    if not commits:
        raise ValueError("push event contains no commits")
    if not all(isinstance(commit, Mapping) for commit in commits):
        raise ValueError("push event commits must be JSON objects")
    last_commit = commits[-1]
    pusher = str((event.get("pusher") or {}).get("name", "unknown"))

    body = "\n".join(
        [
            "Includes:",
            f"<b>{_plural(len(commits), 'commit')}</b> by {', '.join(_unique_committers(commits))}",
            f"<b>{_plural(len(changed_files), 'file')}</b> changed",
        ]
    )
    details = (
        ("Msg", str(last_commit.get("message", ""))),
        ("Timestamp", format_short_timestamp(str(last_commit.get("timestamp", "")), tz)),
        ("Author", str((last_commit.get("committer") or {}).get("name", ""))),
        ("Hash", str(last_commit.get("id", ""))),
    )
    compare_url = str(event.get("compare", ""))
    commit_url = str(last_commit.get("url", ""))
    return ChatNotification(
        title="Commit on Main",
        subtitle=f"Pushed by {pusher}",
        header_image_url=GIT_ICON_URL,
        header_image_style="IMAGE",
        body_text=body,
        summary_links=((("View diff on GitHub", compare_url),) if compare_url else ()),
        details_heading="<b>Most Recent Commit:</b>",
        details=details,
        links=((("View commit on GitHub", commit_url),) if commit_url else ()),
    )


def changed_files_from_steps(steps_json: str) -> list[str]:
    """Pull the ``files`` step's JSON file list out of a ``toJSON(steps)`` dump."""
    if not steps_json.strip():
        return []
    steps = json.loads(steps_json)
    if not isinstance(steps, dict):
        raise ValueError("steps must be a JSON object")
    raw = (((steps.get("files") or {}).get("outputs") or {}).get("all")) or "[]"
    files = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(files, list):
        raise ValueError("steps.files.outputs.all must be a JSON list")
    return [str(item) for item in files]
