"""GitHub Actions boundary: workflow inputs in, step outputs out.

Inputs arrive as INPUT_<NAME> environment variables. Outputs are
appended to the file named by GITHUB_OUTPUT; outside Actions they are
only logged.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from squashcat.core.log import logger

# Action input name -> path in the State settings tree
INPUT_FIELDS: dict[str, tuple[str, ...]] = {
    "token": ("config", "github", "token"),
    "target_repos": ("config", "batch", "target_repos"),
    "source_branch": ("config", "batch", "source_branch"),
    "target_branch": ("config", "batch", "target_branch"),
    "commit_message_template": ("config", "batch", "commit_message_template"),
    "delete_source_branch": ("config", "batch", "delete_source_branch"),
    "recreate_source_branch": ("config", "batch", "recreate_source_branch"),
    "create_release": ("config", "batch", "create_release"),
    "merge_strategy": ("config", "batch", "merge_strategy"),
}


def get_input(name: str, environ: Mapping[str, str] | None = None) -> str:
    """Value of an action input, trimmed; "" when unset."""
    environ = os.environ if environ is None else environ
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return environ.get(key, "").strip()


class ActionInputsSettingsSource(PydanticBaseSettingsSource):
    """Settings source reading GitHub Actions inputs.

    Empty inputs are left out so that YAML, environment or defaults
    still apply; Actions passes "" for every input the workflow does
    not set.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(settings_cls)
        self._environ = os.environ if environ is None else environ

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        # Values are assembled as a nested dict in __call__
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for name, path in INPUT_FIELDS.items():
            value = get_input(name, self._environ)
            if not value:
                continue
            node = data
            for part in path[:-1]:
                node = node.setdefault(part, {})
            node[path[-1]] = value
        return data


class ActionOutputs:
    """Writes step outputs and the failure annotation."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        environ = os.environ if environ is None else environ
        output_file = environ.get("GITHUB_OUTPUT")
        self.output_file = Path(output_file) if output_file else None
        self.values: dict[str, str] = {}

    def set_output(self, name: str, value: Any) -> None:
        """Record an output, as a heredoc block in GITHUB_OUTPUT."""
        text = "" if value is None else str(value)
        self.values[name] = text
        logger.info(f"Output {name}", value=text)
        if self.output_file is None:
            return

        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with open(self.output_file, "a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")

    def set_failed(self, message: str) -> None:
        """Emit an error annotation; the caller sets the exit code."""
        logger.error(message)
        escaped = (
            message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        )
        print(f"::error::{escaped}", flush=True)
