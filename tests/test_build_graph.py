import pytest

from roadmap_timeline.core.errors import (
    CircularDependency,
    DuplicateFeature,
    InvalidDuration,
    UnknownDependency,
)
from roadmap_timeline.core.graph.build_graph import build_graph
from roadmap_timeline.core.model import Feature


def _f(fid, days=1, deps=()):
    return Feature(id=fid, title=fid, duration_days=days, depends_on=tuple(deps))


def test_build_graph_adjacency_and_topo_order():
    g = build_graph([_f("C", deps=["A", "B"]), _f("A"), _f("B", deps=["A"])])
    assert g.order == ["C", "A", "B"]
    assert g.depends_on["C"] == ("A", "B")
    assert g.dependents["A"] == ("C", "B")
    assert g.topo_order == ["A", "B", "C"]
    assert g.roots == ["A"]
    assert g.terminals == ["C"]


def test_duplicate_edges_are_idempotent():
    g = build_graph([_f("A"), _f("B", deps=["A", "A"])])
    assert g.depends_on["B"] == ("A",)
    assert g.dependents["A"] == ("B",)


def test_cycle_raises_with_ids():
    with pytest.raises(CircularDependency) as ei:
        build_graph([_f("A", deps=["C"]), _f("B", deps=["A"]), _f("C", deps=["B"])])
    assert ei.value.code == "E_CIRCULAR_DEPENDENCY"
    assert set(ei.value.feature_ids) == {"A", "B", "C"}


def test_self_reference_is_a_cycle():
    with pytest.raises(CircularDependency) as ei:
        build_graph([_f("A", deps=["A"])])
    assert ei.value.feature_ids == ("A",)


def test_unknown_dependency():
    with pytest.raises(UnknownDependency) as ei:
        build_graph([_f("A", deps=["NOPE"])])
    assert "NOPE" in ei.value.feature_ids
    assert ei.value.path == "features[0].depends_on[0]"


def test_invalid_duration():
    with pytest.raises(InvalidDuration):
        build_graph([_f("A", days=0)])
    with pytest.raises(InvalidDuration):
        build_graph([Feature(id="B", title="B")])


def test_duplicate_feature_id():
    with pytest.raises(DuplicateFeature):
        build_graph([_f("A"), _f("A")])


def test_week_estimate_converts_to_days():
    g = build_graph([Feature(id="A", title="A", effort_estimate_weeks=2), Feature(id="B", title="B", effort_estimate_weeks=0.5)])
    assert g.durations == {"A": 14, "B": 4}


def test_non_finite_week_estimate_is_invalid():
    with pytest.raises(InvalidDuration):
        build_graph([Feature(id="A", title="A", effort_estimate_weeks=float("nan"))])
    with pytest.raises(InvalidDuration):
        build_graph([Feature(id="A", title="A", effort_estimate_weeks=float("inf"))])
