import json
from pathlib import Path

import pytest

from compile_notify.chat_cards import (
    NO_DETAILS_MESSAGE,
    build_compile_failure_notification,
    build_raw_source_url,
    build_source_line_url,
    render_error_body,
    serialize_card_payload,
)
from compile_notify.config import Settings
from compile_notify.error_parsing import extract_error_entries


def _settings(**overrides) -> Settings:
    values = {
        "github_repository": "octo/pwamp",
        "github_ref_name": "main",
        "source_path": Path("./src/pwamp.js"),
    }
    values.update(overrides)
    return Settings(**values)


def test_source_line_url_points_at_blob_line() -> None:
    url = build_source_line_url("https://github.com/", "octo/pwamp", "main", "./src/pwamp.js", 42)
    assert url == "https://github.com/octo/pwamp/blob/main/src/pwamp.js#L42"


def test_source_line_url_without_line_has_no_anchor() -> None:
    url = build_source_line_url("https://github.com", "octo/pwamp", "feature/x", "src/pwamp.js", None)
    assert url == "https://github.com/octo/pwamp/blob/feature/x/src/pwamp.js"


def test_raw_source_url() -> None:
    assert (
        build_raw_source_url("octo/pwamp", "main", "src/pwamp.js")
        == "https://raw.githubusercontent.com/octo/pwamp/main/src/pwamp.js"
    )


def test_body_highlights_message_and_links_each_entry() -> None:
    entries = extract_error_entries(
        "Input_0:12:4: ERROR - variable foo is undeclared.\n  12| foo();\n\n"
        "Input_0:30:1: ERROR - missing ;\n"
    )
    body = render_error_body(entries, _settings())

    assert 'Input_0:12:4: <b><font color="red">ERROR - variable foo is undeclared</font></b>' in body
    assert '<a href="https://github.com/octo/pwamp/blob/main/src/pwamp.js#L12">View on GitHub</a>' in body
    assert "src/pwamp.js#L30" in body
    assert body.count("View on GitHub") == 2


def test_body_escapes_markup_from_compiler_output() -> None:
    entries = extract_error_entries("Input_0:3:1: ERROR - unexpected <script> & friends\n")
    body = render_error_body(entries, _settings())
    assert "&lt;script&gt; &amp; friends" in body


def test_body_without_entries_uses_fallback_text() -> None:
    assert render_error_body([], _settings()) == NO_DETAILS_MESSAGE


@pytest.mark.parametrize(
    "error_text",
    [
        "Input_0:1:1: ERROR - boom",
        'quotes " and \' and \\ backslashes',
        "multi\nline\n\nerror ✓",
    ],
)
def test_payload_is_json_with_card_shape(error_text: str) -> None:
    settings = _settings()
    notification = build_compile_failure_notification(extract_error_entries(error_text), settings)
    payload = json.loads(serialize_card_payload(notification))

    card = payload["cards"][0]
    assert card["header"]["title"] == settings.card_title
    widgets = card["sections"][0]["widgets"]
    assert widgets[0] == {"image": {"imageUrl": settings.card_image_url}}
    assert widgets[1]["textParagraph"]["text"] == notification.body_text
    assert len(payload["cards"]) == 1
