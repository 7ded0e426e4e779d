"""Load fit configuration files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from population_fit.exceptions import ConfigError, ConfigValidationError


def load_config(path: Path | None, section: str | None = None) -> Dict[str, Any]:
    """Read a JSON configuration file, optionally returning one top-level section.

    A missing section yields an empty dict so that defaults apply.
    """

    if path is None:
        return {}
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigValidationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config root must be an object in {path}")
    if section is None:
        return data
    value = data.get(section, {})
    if not isinstance(value, dict):
        raise ConfigValidationError(f"Config section '{section}' must be an object")
    return value


def merge_overrides(base: Dict[str, Any], **overrides: Any) -> Dict[str, Any]:
    """Return base updated with every override that is not None."""

    merged = dict(base)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged


__all__ = ["load_config", "merge_overrides"]
