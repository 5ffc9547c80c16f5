import json

import pytest

from roadmap_timeline.core.errors import TimelineLoadError
from roadmap_timeline.core.io.roadmap_import import roadmap_to_features
from roadmap_timeline.core.validate.validate_features import validate_features


def test_roadmap_indexes_become_ids():
    with open("examples/roadmap-response.json", encoding="utf-8") as f:
        roadmap = json.load(f)
    doc = roadmap_to_features(roadmap)
    assert [n["id"] for n in doc["features"]] == ["F-001", "F-002", "F-003"]
    assert doc["features"][2]["depends_on"] == ["F-001", "F-002"]
    assert doc["features"][1]["effort_estimate_weeks"] == 3
    assert doc["risk_level"] == "medium"

    features, errors = validate_features(doc)
    assert errors == []
    assert features[1].resolved_duration_days() == 21


def test_roadmap_bad_index():
    roadmap = {"features": [{"title": "x", "effortEstimateWeeks": 1, "dependsOn": [3]}]}
    with pytest.raises(TimelineLoadError) as ei:
        roadmap_to_features(roadmap)
    assert ei.value.code == "E_ROADMAP_BAD_INDEX"
    assert ei.value.path == "features[0].dependsOn[0]"


def test_roadmap_without_features():
    with pytest.raises(TimelineLoadError) as ei:
        roadmap_to_features({"summary": "empty"})
    assert ei.value.code == "E_ROADMAP_NO_FEATURES"
