from datetime import date

from roadmap_timeline.core.graph.build_graph import build_graph
from roadmap_timeline.core.io.load_features import load_features
from roadmap_timeline.core.validate.validate_features import (
    parse_date,
    summarize_features,
    validate_features,
)


def test_validate_happy_path():
    doc = load_features("examples/basic-features.yaml")
    features, errors = validate_features(doc)
    assert errors == []
    assert features is not None
    assert [f.id for f in features] == ["A", "B", "C", "D"]
    assert features[2].depends_on == ("A", "B")
    assert features[3].resolved_duration_days() == 7
    assert features[0].status == "active"


def test_validate_unknown_dependency():
    doc = load_features("examples/invalid-unknown-dep.yaml")
    features, errors = validate_features(doc)
    assert features is None
    assert [e.code for e in errors] == ["E_UNKNOWN_DEPENDENCY"]
    assert errors[0].path == "features[0].depends_on[0]"


def test_validate_invalid_duration():
    doc = load_features("examples/invalid-duration.yaml")
    features, errors = validate_features(doc)
    assert features is None
    assert any(e.code == "E_INVALID_DURATION" for e in errors)


def test_validate_shape_errors():
    doc = {
        "features": [
            {"id": "A", "duration_days": 2, "depends_on": "B"},
            {"id": "", "duration_days": 2},
            {"id": "C", "duration_days": 2, "status": "done"},
            {"id": "D"},
            {"id": "D", "duration_days": 1},
            {"id": "E", "duration_days": 1, "depends_on": ["E"]},
        ]
    }
    features, errors = validate_features(doc)
    assert features is None
    codes = {(e.path, e.code) for e in errors}
    assert ("features[0].depends_on", "E_INVALID_TYPE") in codes
    assert ("features[1].id", "E_REQUIRED_FIELD") in codes
    assert ("features[2].status", "E_INVALID_ENUM") in codes
    assert ("features[3]", "E_REQUIRED_FIELD") in codes
    assert ("features[4].id", "E_DUPLICATE_ID") in codes
    assert ("features[5].depends_on", "E_SELF_DEPENDENCY") in codes


def test_validate_camel_case_and_dates():
    doc = {
        "features": [
            {"id": "A", "title": "A", "effortEstimateWeeks": 1, "dependsOn": []},
            {"id": "B", "title": "B", "startDate": "2024-02-01", "endDate": "2024-02-11", "dependsOn": ["A", "A"]},
        ]
    }
    features, errors = validate_features(doc)
    assert errors == []
    assert features[1].start_date == date(2024, 2, 1)
    assert features[1].resolved_duration_days() == 10
    assert features[1].depends_on == ("A",)


def test_validate_missing_features_list():
    features, errors = validate_features({"project_start": "not-a-date"})
    assert features is None
    assert {e.code for e in errors} == {"E_INVALID_DATE", "E_REQUIRED_FIELD"}


def test_summarize_features():
    features, _ = validate_features(load_features("examples/basic-features.yaml"))
    text = summarize_features(build_graph(features))
    assert text.startswith("OK: 4 features")
    assert "Roots: A, B" in text


def test_validate_non_finite_weeks():
    for weeks in (float("nan"), float("inf"), float("-inf"), 1e308):
        features, errors = validate_features({"features": [{"id": "A", "effort_estimate_weeks": weeks}]})
        assert features is None
        assert [(e.path, e.code) for e in errors] == [
            ("features[0].effort_estimate_weeks", "E_INVALID_DURATION")
        ]


def test_validate_unhashable_enum_values():
    doc = {
        "features": [
            {"id": "A", "duration_days": 1, "status": ["active"]},
            {"id": "B", "duration_days": 1, "priority": {"level": "P0"}},
        ]
    }
    features, errors = validate_features(doc)
    assert features is None
    assert {(e.path, e.code) for e in errors} == {
        ("features[0].status", "E_INVALID_ENUM"),
        ("features[1].priority", "E_INVALID_ENUM"),
    }


def test_parse_date_rejects_trailing_junk():
    assert parse_date("2024-01-01garbage") is None
    assert parse_date("2024-01-01 x") is None
    assert parse_date("2024-13-01") is None
    assert parse_date("2024-01-01") == date(2024, 1, 1)
    assert parse_date(" 2024-01-01T09:30:00Z ") == date(2024, 1, 1)
    assert parse_date("2024-01-01 09:30") == date(2024, 1, 1)
    assert parse_date("2024-01-01T09:30:00.5+02:00") == date(2024, 1, 1)


def test_validate_start_date_with_junk():
    doc = {"features": [{"id": "A", "start_date": "2024-01-01garbage", "end_date": "2024-01-05"}]}
    features, errors = validate_features(doc)
    assert features is None
    assert ("features[0].start_date", "E_INVALID_DATE") in {(e.path, e.code) for e in errors}
