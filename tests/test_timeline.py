from datetime import date

import pytest

from roadmap_timeline.core.errors import CircularDependency, InvalidDuration, UnknownDependency
from roadmap_timeline.core.io.dump_timeline import dump_timeline_json, timeline_to_dict
from roadmap_timeline.core.model import Feature
from roadmap_timeline.core.timeline import schedule


START = date(2024, 1, 1)


def _f(fid, days, deps=()):
    return Feature(id=fid, title=fid, duration_days=days, depends_on=tuple(deps))


def test_schedule_full_pipeline():
    result = schedule([_f("A", 5), _f("B", 2), _f("C", 3, ["A", "B"])], START)
    assert [sf.id for sf in result.features] == ["A", "B", "C"]
    assert result.critical_path.path == ["A", "C"]
    assert [c.depth for c in result.dependency_chains] == [0, 0, 1]
    assert [m.date for m in result.milestones] == [date(2024, 1, 3), date(2024, 1, 6), date(2024, 1, 9)]
    assert [(o.feature1, o.feature2, o.overlap_days) for o in result.overlaps] == [("A", "B", 2)]


def test_cycle_produces_no_result():
    with pytest.raises(CircularDependency):
        schedule([_f("A", 1, ["C"]), _f("B", 1, ["A"]), _f("C", 1, ["B"])], START)


def test_unknown_reference_rejected():
    with pytest.raises(UnknownDependency):
        schedule([_f("A", 1, ["ghost"])], START)


def test_empty_schedule():
    result = schedule([], START)
    assert result.features == []
    assert result.critical_path is None
    assert result.milestones == []
    assert result.overlaps == []
    assert timeline_to_dict(result)["criticalPath"] is None


def test_overlaps_can_be_disabled():
    result = schedule([_f("A", 5), _f("B", 5)], START, include_overlaps=False)
    assert result.overlaps == []


def test_determinism_byte_identical():
    features = [_f("n2", 3), _f("n1", 3), _f("tail", 2, ["n2", "n1"]), _f("side", 1)]
    first = dump_timeline_json(schedule(features, START))
    second = dump_timeline_json(schedule(list(features), START))
    assert first == second


def test_serialized_shape():
    ids = ["Feature/Ω-1", "feature-2"]
    result = schedule([_f(ids[0], 5), _f(ids[1], 2, [ids[0]])], START)
    d = timeline_to_dict(result)
    assert set(d) == {"projectStart", "features", "dependencyChains", "criticalPath", "milestones", "overlaps"}
    assert [f["id"] for f in d["features"]] == ids
    assert d["features"][1]["earliestStart"] == "2024-01-06"
    assert d["criticalPath"] == {
        "path": ids,
        "totalDuration": 7,
        "startDate": "2024-01-01",
        "endDate": "2024-01-08",
    }
    assert d["dependencyChains"][1] == {"featureId": ids[1], "chain": ids, "depth": 1}


def test_finish_past_date_max_is_invalid_duration():
    with pytest.raises(InvalidDuration) as ei:
        schedule([_f("A", 3_000_000)], START)
    assert ei.value.code == "E_INVALID_DURATION"
    assert ei.value.feature_ids == ("A",)


def test_chained_finish_past_date_max_is_invalid_duration():
    features = [_f("A", 2_000_000), _f("B", 2_000_000, ["A"])]
    with pytest.raises(InvalidDuration) as ei:
        schedule(features, START)
    assert ei.value.feature_ids == ("B",)


def test_duration_beyond_timedelta_range_is_invalid_duration():
    with pytest.raises(InvalidDuration):
        schedule([_f("A", 10**12)], START)
