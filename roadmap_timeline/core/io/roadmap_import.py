from __future__ import annotations

from typing import Any

import yaml

from roadmap_timeline.core.errors import TimelineLoadError


def roadmap_to_features(roadmap: Any, *, file: str | None = None, id_prefix: str = "F") -> dict[str, Any]:
    """Convert a generated roadmap response into a feature document.

    The response lists features positionally and `dependsOn` holds indexes into
    that list. Ids are allocated as F-001, F-002, ... in list order and every
    index is rewritten to the matching id. Field values are copied as-is; the
    validator owns shape checking of the result.
    """

    if not isinstance(roadmap, dict):
        raise TimelineLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="roadmap must be a mapping/object",
            file=file,
        )
    raw_features = roadmap.get("features")
    if not isinstance(raw_features, list):
        raise TimelineLoadError(
            code="E_ROADMAP_NO_FEATURES",
            message="roadmap.features must be an array",
            file=file,
            path="features",
        )

    ids = [f"{id_prefix}-{i + 1:03d}" for i in range(len(raw_features))]
    out_features: list[dict[str, Any]] = []

    for i, raw in enumerate(raw_features):
        if not isinstance(raw, dict):
            raise TimelineLoadError(
                code="E_INVALID_TYPE",
                message="roadmap feature must be an object",
                file=file,
                path=f"features[{i}]",
            )

        deps: list[str] = []
        for di, idx in enumerate(raw.get("dependsOn") or []):
            if not isinstance(idx, int) or isinstance(idx, bool) or not 0 <= idx < len(ids):
                raise TimelineLoadError(
                    code="E_ROADMAP_BAD_INDEX",
                    message=f"dependsOn index out of range: {idx!r}",
                    file=file,
                    path=f"features[{i}].dependsOn[{di}]",
                )
            deps.append(ids[idx])

        node: dict[str, Any] = {
            "id": ids[i],
            "title": raw.get("title"),
        }
        if raw.get("description") is not None:
            node["description"] = raw.get("description")
        if raw.get("priority") is not None:
            node["priority"] = raw.get("priority")
        node["effort_estimate_weeks"] = raw.get("effortEstimateWeeks")
        node["depends_on"] = deps
        out_features.append(node)

    doc: dict[str, Any] = {"features": out_features}
    if isinstance(roadmap.get("summary"), str):
        doc["summary"] = roadmap["summary"]
    if isinstance(roadmap.get("riskLevel"), str):
        doc["risk_level"] = roadmap["riskLevel"]
    return doc


def dump_features_yaml(doc: dict[str, Any], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(doc, f, sort_keys=False, default_flow_style=False, allow_unicode=True)
