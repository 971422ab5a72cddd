from __future__ import annotations

import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def _escape_command_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_action_output(output_path: Path | None, name: str, value: str) -> bool:
    """Append a step output using the multi-line ``name<<delimiter`` form.

    Returns False when no ``GITHUB_OUTPUT`` file is configured.
    """
    if output_path is None:
        logger.debug("GITHUB_OUTPUT not set; skipping output %s", name)
        return False
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with output_path.open("a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True


def format_error_command(message: str) -> str:
    return f"::error::{_escape_command_data(message)}"


def report_failure(message: str) -> int:
    print(format_error_command(message))
    return 1
