from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from roadmap_timeline.core.model import CriticalPath, ScheduledFeature, TimelineResult


def timeline_to_dict(result: TimelineResult) -> dict[str, Any]:
    """Serialize to the output contract: camelCase keys, ISO day strings, ids verbatim."""
    return {
        "projectStart": result.project_start.isoformat(),
        "features": [_feature_to_dict(sf) for sf in result.features],
        "dependencyChains": [
            {"featureId": c.feature_id, "chain": list(c.chain), "depth": c.depth}
            for c in result.dependency_chains
        ],
        "criticalPath": _critical_to_dict(result.critical_path),
        "milestones": [
            {
                "date": m.date.isoformat(),
                "features": list(m.features),
                "description": m.description,
            }
            for m in result.milestones
        ],
        "overlaps": [
            {"feature1": o.feature1, "feature2": o.feature2, "overlapDays": o.overlap_days}
            for o in result.overlaps
        ],
    }


def dump_timeline_json(result: TimelineResult) -> str:
    return json.dumps(timeline_to_dict(result), indent=2, sort_keys=True)


def dump_timeline_yaml(result: TimelineResult) -> str:
    return yaml.safe_dump(
        timeline_to_dict(result), sort_keys=False, default_flow_style=False, allow_unicode=True
    )


def write_text(path: str, text: str) -> None:
    p = Path(path)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")


def _feature_to_dict(sf: ScheduledFeature) -> dict[str, Any]:
    f = sf.feature
    return {
        "id": f.id,
        "title": f.title,
        "status": f.status,
        "priority": f.priority,
        "dependsOn": list(f.depends_on),
        "durationDays": sf.duration_days,
        "earliestStart": sf.earliest_start.isoformat(),
        "earliestFinish": sf.earliest_finish.isoformat(),
        "latestStart": sf.latest_start.isoformat(),
        "latestFinish": sf.latest_finish.isoformat(),
        "slackDays": sf.slack_days,
        "isOnCriticalPath": sf.is_on_critical_path,
    }


def _critical_to_dict(cp: Optional[CriticalPath]) -> Optional[dict[str, Any]]:
    if cp is None:
        return None
    return {
        "path": list(cp.path),
        "totalDuration": cp.total_duration,
        "startDate": cp.start_date.isoformat(),
        "endDate": cp.end_date.isoformat(),
    }
