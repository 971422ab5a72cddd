from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, field_validator


@dataclass(frozen=True)
class CompileRequest:
    source_text: str | None
    source_url: str | None = None
    compilation_level: str = "SIMPLE"
    language_out: str = "ECMASCRIPT_2018"

    @property
    def method(self) -> str:
        return "GET" if self.source_url else "POST"


class CompileResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    error: str = ""

    @field_validator("error", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value


@dataclass(frozen=True)
class ErrorEntry:
    input_name: str
    line: int | None
    column: int | None
    message: str
    excerpt: str = ""


@dataclass(frozen=True)
class ChatNotification:
    title: str
    body_text: str
    image_url: str | None = None
    subtitle: str | None = None
    header_image_url: str | None = None
    header_image_style: str | None = None
    summary_links: tuple[tuple[str, str], ...] = ()
    details_heading: str | None = None
    details: tuple[tuple[str, str], ...] = ()
    links: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class RunResult:
    compiled: bool
    error_count: int
    notification_attempted: bool
    notification_delivered: bool
    chat_message: str | None
