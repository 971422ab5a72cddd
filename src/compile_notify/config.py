from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_SOURCE_PATH = Path("src/pwamp.js")
DEFAULT_COMPILER_URL = "https://wompclosure.azurewebsites.net/compile"
DEFAULT_CARD_TITLE = "PWAMP compiling failed!!"
DEFAULT_CARD_IMAGE_URL = "https://miro.medium.com/max/552/1*ON_d7DWgW8g8uu3EBntfNw.png"

# setting name -> environment variable reported when the value is missing
RUN_REQUIRED_SETTINGS = {
    "chat_webhook_url": "CHAT_WEBHOOK_URL",
    "github_repository": "GITHUB_REPOSITORY",
    "github_ref_name": "GITHUB_REF_NAME",
}

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    source_path: Path = Field(default=DEFAULT_SOURCE_PATH)
    source_url: str = ""
    compiler_url: str = DEFAULT_COMPILER_URL
    compiler_method: Literal["post", "get"] = "post"
    compilation_level: str = "SIMPLE"
    language_out: str = "ECMASCRIPT_2018"
    github_repository: str = ""
    github_ref_name: str = ""
    github_server_url: str = "https://github.com"
    chat_webhook_url: str = ""
    chat_webhook_key: str = ""
    chat_webhook_token: str = ""
    card_title: str = DEFAULT_CARD_TITLE
    card_image_url: str = DEFAULT_CARD_IMAGE_URL
    tz: str = "America/Los_Angeles"
    request_timeout_seconds: float = Field(default=20.0, gt=0.0)
    fail_on_compile_error: bool = False
    github_output_path: Path | None = None

    @field_validator("chat_webhook_url")
    @classmethod
    def _validate_webhook_url(cls, value: str) -> str:
        if value and not value.startswith("https://"):
            raise ValueError("CHAT_WEBHOOK_URL must use https://")
        return value

    @field_validator("compiler_url")
    @classmethod
    def _validate_compiler_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("COMPILER_URL must be an http(s) URL")
        return value

    @field_validator("compiler_method", mode="before")
    @classmethod
    def _normalize_method(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or "post"
        return value

    @property
    def webhook_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.chat_webhook_key:
            params["key"] = self.chat_webhook_key
        if self.chat_webhook_token:
            params["token"] = self.chat_webhook_token
        return params


def _input_name(key: str) -> str:
    return f"INPUT_{key.replace(' ', '_').upper()}"


def _env_value(environ: Mapping[str, str], key: str) -> str:
    """Action input first (``INPUT_<KEY>``), then the plain variable."""
    value = environ.get(_input_name(key), "").strip()
    if value:
        return value
    return environ.get(key, "").strip()


def _github_context(environ: Mapping[str, str]) -> dict[str, str]:
    raw = environ.get("INPUT_GITHUB", "").strip()
    if not raw:
        return {}
    try:
        context = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"INPUT_GITHUB is not valid JSON: {exc}") from exc
    if not isinstance(context, dict):
        raise ValueError("INPUT_GITHUB must be a JSON object")
    return {key: str(value) for key, value in context.items() if isinstance(value, str)}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    source = os.environ if environ is None else environ
    github = _github_context(source)
    output_path = _env_value(source, "GITHUB_OUTPUT")
    payload = {
        "source_path": Path(_env_value(source, "SOURCE_PATH") or DEFAULT_SOURCE_PATH),
        "source_url": _env_value(source, "SOURCE_URL"),
        "compiler_url": _env_value(source, "COMPILER_URL") or DEFAULT_COMPILER_URL,
        "compiler_method": _env_value(source, "COMPILER_METHOD") or "post",
        "compilation_level": _env_value(source, "COMPILATION_LEVEL") or "SIMPLE",
        "language_out": _env_value(source, "LANGUAGE_OUT") or "ECMASCRIPT_2018",
        "github_repository": _env_value(source, "GITHUB_REPOSITORY") or github.get("repository", ""),
        "github_ref_name": _env_value(source, "GITHUB_REF_NAME") or github.get("ref_name", ""),
        "github_server_url": (
            _env_value(source, "GITHUB_SERVER_URL") or github.get("server_url") or "https://github.com"
        ),
        "chat_webhook_url": _env_value(source, "CHAT_WEBHOOK_URL"),
        "chat_webhook_key": _env_value(source, "CHAT_WEBHOOK_KEY"),
        "chat_webhook_token": _env_value(source, "CHAT_WEBHOOK_TOKEN"),
        "card_title": _env_value(source, "CARD_TITLE") or DEFAULT_CARD_TITLE,
        "card_image_url": _env_value(source, "CARD_IMAGE_URL") or DEFAULT_CARD_IMAGE_URL,
        "tz": _env_value(source, "TZ") or "America/Los_Angeles",
        "request_timeout_seconds": float(_env_value(source, "REQUEST_TIMEOUT_SECONDS") or "20"),
        "fail_on_compile_error": _env_value(source, "FAIL_ON_COMPILE_ERROR").lower() in _TRUTHY,
        "github_output_path": Path(output_path) if output_path else None,
    }
    try:
        return Settings(**payload)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


def missing_settings(settings: Settings, required: Mapping[str, str] = RUN_REQUIRED_SETTINGS) -> list[str]:
    return [env_name for field_name, env_name in required.items() if not getattr(settings, field_name)]


def assert_required_settings(
    settings: Settings, required: Mapping[str, str] = RUN_REQUIRED_SETTINGS
) -> None:
    missing = missing_settings(settings, required)
    if missing:
        keys = ", ".join(missing)
        raise ValueError(f"Missing required environment variables: {keys}")


def mask_secret(value: str, visible_prefix: int = 3, visible_suffix: int = 2) -> str:
    if not value:
        return ""
    if len(value) <= visible_prefix + visible_suffix:
        return "*" * len(value)
    hidden = "*" * (len(value) - visible_prefix - visible_suffix)
    return f"{value[:visible_prefix]}{hidden}{value[-visible_suffix:]}"


def mask_url(url: str) -> str:
    """Keep scheme and host of a webhook URL, mask the rest."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return mask_secret(url)
    host, slash, tail = rest.partition("/")
    if not slash:
        return url
    return f"{scheme}://{host}/{mask_secret(tail)}"
