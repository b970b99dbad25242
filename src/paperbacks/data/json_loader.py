"""Low-level JSON helpers for repositories."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import DataLoadError, DataValidationError


def load_json(path: Path, expected_type: type | tuple[type, ...] | None = None) -> object:
    """Read a story data file.

    Raises DataLoadError when the file cannot be read or decoded, and
    DataValidationError when ``expected_type`` is given and the top-level value
    is of another type.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise DataLoadError(f"Story data file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"{path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise DataLoadError(f"Unable to read story data file {path}: {exc}") from exc

    if expected_type is not None and not isinstance(raw, expected_type):
        raise DataValidationError(f"Expected a top-level {_describe(expected_type)} in {path}.")
    return raw


def _describe(expected_type: type | tuple[type, ...]) -> str:
    kinds = expected_type if isinstance(expected_type, tuple) else (expected_type,)
    return " or ".join("array" if kind is list else "object" for kind in kinds)
