from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from roadmap_timeline.core.errors import TimelineLoadError


def load_document(path: str) -> Any:
    """Read a YAML/JSON file and return the parsed document untouched."""

    p = Path(path)
    if not p.exists():
        raise TimelineLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    try:
        raw_text = p.read_text(encoding="utf-8")
    except Exception as e:  # pragma: no cover
        raise TimelineLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(raw_text)
        elif suffix == ".json":
            return json.loads(raw_text)
        else:
            raise TimelineLoadError(
                code="E_UNSUPPORTED_FORMAT",
                message="supported formats are .yaml/.yml and .json",
                file=str(p),
            )
    except TimelineLoadError:
        raise
    except Exception as e:
        code = "E_YAML_PARSE" if suffix in {".yaml", ".yml"} else "E_JSON_PARSE"
        raise TimelineLoadError(code=code, message=str(e), file=str(p)) from e


def load_features(path: str) -> dict[str, Any]:
    """Load a YAML/JSON feature file.

    Returns a dict with keys: project_start, features.
    Does not coerce types; validator owns shape checking.
    """

    data = load_document(path)
    if not isinstance(data, dict):
        raise TimelineLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(path),
        )

    # Normalize: keep only expected keys; accept the camelCase spelling too.
    project_start = data.get("project_start", data.get("projectStart"))
    normalized: dict[str, Any] = {
        "project_start": project_start,
        "features": data.get("features"),
    }
    normalized["__file__"] = str(Path(path))
    return normalized
