from __future__ import annotations

import math
import re
from collections import Counter
from datetime import date, datetime
from typing import Any, Iterable, Optional, cast

from roadmap_timeline.core.errors import TimelineValidationError
from roadmap_timeline.core.model import DAYS_PER_WEEK, Feature, FeatureGraph, FeaturePriority, FeatureStatus


ALLOWED_STATUSES: set[str] = {"backlog", "active", "blocked", "complete"}
ALLOWED_PRIORITIES: set[str] = {"P0", "P1", "P2"}

_ISO_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$")

# snake_case key -> accepted camelCase alias
_ALIASES: dict[str, str] = {
    "depends_on": "dependsOn",
    "effort_estimate_weeks": "effortEstimateWeeks",
    "duration_days": "durationDays",
    "start_date": "startDate",
    "end_date": "endDate",
}


def parse_date(v: Any) -> Optional[date]:
    """Accept a date, a datetime (time-of-day dropped) or an ISO 'YYYY-MM-DD[...]' string."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        m = _ISO_DATE.match(v.strip())
        if m is None:
            return None
        try:
            return date.fromisoformat(m.group(1))
        except ValueError:
            return None
    return None


def _get(raw: dict[str, Any], key: str) -> Any:
    if key in raw:
        return raw[key]
    alias = _ALIASES.get(key)
    return raw.get(alias) if alias else None


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_features(
    doc: dict[str, Any],
) -> tuple[Optional[list[Feature]], list[TimelineValidationError]]:
    """Validate a feature document.

    Returns (features, errors). Features is None when errors exist.
    Graph-level cycles are left to the engine; everything else that can be
    pinned to a field is reported here.
    """

    file = cast(Optional[str], doc.get("__file__"))
    errors: list[TimelineValidationError] = []

    def err(code: str, message: str, path: str) -> None:
        errors.append(TimelineValidationError(code=code, message=message, file=file, path=path))

    start = doc.get("project_start")
    if start is not None and parse_date(start) is None:
        err("E_INVALID_DATE", "project_start must be a YYYY-MM-DD date", "project_start")

    raw_features = doc.get("features")
    if not isinstance(raw_features, list):
        err("E_REQUIRED_FIELD", "features is required and must be an array", "features")
        return None, _sorted(errors)

    features: list[Feature] = []
    seen: dict[str, int] = {}

    for i, raw in enumerate(raw_features):
        fpath = f"features[{i}]"
        if not isinstance(raw, dict):
            err("E_INVALID_TYPE", "feature must be an object", fpath)
            continue

        fid = raw.get("id")
        if not isinstance(fid, str) or not fid.strip():
            err("E_REQUIRED_FIELD", "id is required and must be a non-empty string", f"{fpath}.id")
            continue
        if fid in seen:
            err("E_DUPLICATE_ID", f"duplicate feature id: {fid}", f"{fpath}.id")
            continue
        seen[fid] = i

        title = raw.get("title", fid)
        if not isinstance(title, str):
            err("E_INVALID_TYPE", "title must be a string", f"{fpath}.title")
            continue

        deps = _get(raw, "depends_on")
        if deps is None:
            deps = []
        if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
            err("E_INVALID_TYPE", "depends_on must be an array of strings", f"{fpath}.depends_on")
            continue
        if fid in deps:
            err("E_SELF_DEPENDENCY", f"feature {fid} depends on itself", f"{fpath}.depends_on")

        weeks = _get(raw, "effort_estimate_weeks")
        if weeks is not None and not _is_number(weeks):
            err("E_INVALID_TYPE", "effort_estimate_weeks must be a number", f"{fpath}.effort_estimate_weeks")
            continue
        if isinstance(weeks, float) and not math.isfinite(weeks * DAYS_PER_WEEK):
            err("E_INVALID_DURATION", "effort_estimate_weeks must be a finite number", f"{fpath}.effort_estimate_weeks")
            continue

        days = _get(raw, "duration_days")
        if days is not None and (not isinstance(days, int) or isinstance(days, bool)):
            err("E_INVALID_TYPE", "duration_days must be an integer", f"{fpath}.duration_days")
            continue

        dates: dict[str, Optional[date]] = {}
        for key in ("start_date", "end_date"):
            v = _get(raw, key)
            dates[key] = parse_date(v) if v is not None else None
            if v is not None and dates[key] is None:
                err("E_INVALID_DATE", f"{key} must be a YYYY-MM-DD date", f"{fpath}.{key}")

        status = raw.get("status", "backlog")
        if not isinstance(status, str) or status not in ALLOWED_STATUSES:
            err("E_INVALID_ENUM", f"status must be one of {sorted(ALLOWED_STATUSES)}", f"{fpath}.status")
            continue

        priority = raw.get("priority")
        if priority is not None and (not isinstance(priority, str) or priority not in ALLOWED_PRIORITIES):
            err("E_INVALID_ENUM", f"priority must be one of {sorted(ALLOWED_PRIORITIES)}", f"{fpath}.priority")
            continue

        description = raw.get("description")
        if description is not None and not isinstance(description, str):
            err("E_INVALID_TYPE", "description must be a string", f"{fpath}.description")

        feature = Feature(
            id=fid,
            title=title,
            depends_on=tuple(dict.fromkeys(deps)),
            effort_estimate_weeks=cast(Optional[float], weeks),
            duration_days=cast(Optional[int], days),
            start_date=dates["start_date"],
            end_date=dates["end_date"],
            status=cast(FeatureStatus, status),
            priority=cast(Optional[FeaturePriority], priority),
            description=cast(Optional[str], description),
        )
        resolved = feature.resolved_duration_days()
        if resolved is None:
            err(
                "E_REQUIRED_FIELD",
                "one of effort_estimate_weeks, duration_days or start_date/end_date is required",
                fpath,
            )
        elif resolved <= 0:
            err("E_INVALID_DURATION", f"duration must be positive (got {resolved} days)", fpath)

        features.append(feature)

    # Referential integrity checks.
    for feature in features:
        i = seen[feature.id]
        for di, dep in enumerate(feature.depends_on):
            if dep not in seen:
                err(
                    "E_UNKNOWN_DEPENDENCY",
                    f"depends_on references unknown id: {dep}",
                    f"features[{i}].depends_on[{di}]",
                )

    if errors:
        return None, _sorted(errors)
    return features, []


def summarize_features(graph: FeatureGraph) -> str:
    counts = Counter([f.status for f in graph.features_by_id.values()])
    ordered: list[str] = ["backlog", "active", "blocked", "complete"]
    parts = [f"{s}={counts.get(s, 0)}" for s in ordered]
    return (
        f"OK: {len(graph.order)} features ("
        + ", ".join(parts)
        + ")\nRoots: "
        + ", ".join(graph.roots)
    )


def _sorted(errors: Iterable[TimelineValidationError]) -> list[TimelineValidationError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
