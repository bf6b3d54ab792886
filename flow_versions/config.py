"""Settings file reading and writing utilities.

flow-versions.toml sits next to the root pom.xml. Its [release] table holds
the ReleaseContext settings and its [state] table remembers version maps
between workflow steps (last release, pre-hotfix). Uses tomlkit to preserve
formatting and comments when the state is written back.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import ParseError as TOMLParseError

from .errors import ConfigError
from .models import FlowState, ReleaseContext

CONFIG_FILE = "flow-versions.toml"


def config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_FILE


def load_config(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse the settings file; a missing file yields an empty document.

    Raises:
        ConfigError: If the file is not valid TOML.
    """
    if not path.exists():
        return tomlkit.document()
    try:
        return tomlkit.parse(path.read_text())
    except TOMLParseError as exc:
        raise ConfigError(f"Invalid {path.name}: {exc}") from exc


def save_config(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_release_context(
    doc: tomlkit.TOMLDocument, overrides: Mapping[str, Any] | None = None
) -> ReleaseContext:
    """Build the ReleaseContext from [release], applying non-None overrides.

    Args:
        doc: Parsed settings document.
        overrides: Field name → value, typically CLI options. None values
                   leave the file's setting in place.

    Raises:
        ConfigError: If a setting has the wrong type.
    """
    settings: dict[str, Any] = doc.unwrap().get("release", {})
    try:
        ctx = ReleaseContext.model_validate(settings)
        updates = {k: v for k, v in (overrides or {}).items() if v is not None}
        if updates:
            ctx = ReleaseContext.model_validate(ctx.model_dump() | updates)
    except ValidationError as exc:
        raise ConfigError(f"Invalid [release] settings: {exc}") from exc
    return ctx


def get_flow_state(doc: tomlkit.TOMLDocument) -> FlowState:
    """Extract the remembered version maps from [state]."""
    state = doc.unwrap().get("state", {})
    try:
        return FlowState.model_validate(state)
    except ValidationError as exc:
        raise ConfigError(f"Invalid [state] table: {exc}") from exc


def set_state_versions(
    doc: tomlkit.TOMLDocument, name: str, versions: Mapping[str, str]
) -> None:
    """Replace one [state] version table, e.g. "last-release-versions"."""
    if "state" not in doc:
        doc["state"] = tomlkit.table(is_super_table=True)
    table = tomlkit.table()
    for key, version in versions.items():
        table[key] = version
    doc["state"][name] = table
