from __future__ import annotations

import re

from compile_notify.models import ErrorEntry

# Input_0:12:4: ERROR - [JSC_UNDEFINED_VARIABLE] variable foo is undeclared
_ENTRY_HEADER = re.compile(
    r"^(?P<input>Input[^\s:]*):(?P<line>\d+)(?::(?P<column>\d+))?:\s*(?P<message>.*?)\s*$"
)


def _finish(header: re.Match[str], excerpt_lines: list[str]) -> ErrorEntry:
    column = header.group("column")
    return ErrorEntry(
        input_name=header.group("input"),
        line=int(header.group("line")),
        column=int(column) if column else None,
        message=header.group("message"),
        excerpt="\n".join(excerpt_lines),
    )


def extract_error_entries(error_text: str) -> list[ErrorEntry]:
    """Split compiler error output into one entry per ``Input...:<line>`` header.

    Lines following a header up to the next blank line form its code excerpt.
    Text without any header is returned as a single entry with no line number.
    """
    entries: list[ErrorEntry] = []
    header: re.Match[str] | None = None
    excerpt_lines: list[str] = []
    collecting = False

    for raw_line in (error_text or "").splitlines():
        line = raw_line.rstrip()
        match = _ENTRY_HEADER.match(line)
        if match:
            if header is not None:
                entries.append(_finish(header, excerpt_lines))
            header = match
            excerpt_lines = []
            collecting = True
            continue
        if not line.strip():
            collecting = False
            continue
        if collecting:
            excerpt_lines.append(line)

    if header is not None:
        entries.append(_finish(header, excerpt_lines))

    if not entries and (error_text or "").strip():
        entries.append(
            ErrorEntry(input_name="", line=None, column=None, message=error_text.strip())
        )
    return entries
