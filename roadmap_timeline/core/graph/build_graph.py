from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from roadmap_timeline.core.errors import (
    CircularDependency,
    DuplicateFeature,
    InvalidDuration,
    UnknownDependency,
)
from roadmap_timeline.core.model import Feature, FeatureGraph


logger = logging.getLogger(__name__)


def build_graph(features: Iterable[Feature]) -> FeatureGraph:
    """Build adjacency maps + topological order for a feature snapshot.

    Raises DuplicateFeature, InvalidDuration, UnknownDependency or
    CircularDependency; nothing is returned for an invalid graph.
    """

    features_by_id: dict[str, Feature] = {}
    order: list[str] = []
    for f in features:
        if f.id in features_by_id:
            raise DuplicateFeature(
                code="E_DUPLICATE_ID",
                message=f"duplicate feature id: {f.id}",
                path=f"features[{len(order)}].id",
                feature_ids=(f.id,),
            )
        features_by_id[f.id] = f
        order.append(f.id)

    durations: dict[str, int] = {}
    for i, fid in enumerate(order):
        days = features_by_id[fid].resolved_duration_days()
        if days is None or days <= 0:
            raise InvalidDuration(
                code="E_INVALID_DURATION",
                message=f"feature {fid} must have a positive duration (got {days})",
                path=f"features[{i}]",
                feature_ids=(fid,),
            )
        durations[fid] = days

    depends_on: dict[str, tuple[str, ...]] = {}
    for i, fid in enumerate(order):
        deps = tuple(dict.fromkeys(features_by_id[fid].depends_on))
        for di, dep in enumerate(deps):
            if dep not in features_by_id:
                raise UnknownDependency(
                    code="E_UNKNOWN_DEPENDENCY",
                    message=f"feature {fid} depends on unknown id: {dep}",
                    path=f"features[{i}].depends_on[{di}]",
                    feature_ids=(fid, dep),
                )
        depends_on[fid] = deps

    # Dependents listed in input order.
    dependents_lists: dict[str, list[str]] = {fid: [] for fid in order}
    for fid in order:
        for dep in depends_on[fid]:
            dependents_lists[dep].append(fid)
    dependents = {fid: tuple(v) for fid, v in dependents_lists.items()}

    cycle = find_cycle(order, depends_on)
    if cycle:
        raise CircularDependency(
            code="E_CIRCULAR_DEPENDENCY",
            message="dependency cycle detected: " + " -> ".join(cycle),
            path=f"features[{order.index(cycle[0])}].depends_on",
            feature_ids=tuple(dict.fromkeys(cycle)),
        )

    topo_order = topological_order(order, depends_on, dependents)
    logger.debug("built graph: %d features, %d edges", len(order), sum(len(d) for d in depends_on.values()))

    return FeatureGraph(
        features_by_id=features_by_id,
        order=order,
        depends_on=depends_on,
        dependents=dependents,
        durations=durations,
        topo_order=topo_order,
    )


def find_cycle(order: list[str], depends_on: dict[str, tuple[str, ...]]) -> list[str]:
    """Return the first cycle found as [v, ..., u, v], or [] for a DAG."""
    WHITE, GRAY, BLACK = 0, 1, 2
    state: dict[str, int] = {fid: WHITE for fid in order}
    stack: list[str] = []

    # Iterative DFS; each frame is (node, iterator over its deps).
    for start in order:
        if state[start] != WHITE:
            continue
        state[start] = GRAY
        stack.append(start)
        frames = [iter(depends_on.get(start, ()))]
        while frames:
            advanced = False
            for v in frames[-1]:
                if state[v] == GRAY:
                    idx = stack.index(v)
                    return stack[idx:] + [v]
                if state[v] == WHITE:
                    state[v] = GRAY
                    stack.append(v)
                    frames.append(iter(depends_on.get(v, ())))
                    advanced = True
                    break
            if not advanced:
                frames.pop()
                state[stack.pop()] = BLACK
    return []


def topological_order(
    order: list[str],
    depends_on: dict[str, tuple[str, ...]],
    dependents: dict[str, tuple[str, ...]],
) -> list[str]:
    """Kahn's algorithm, seeded and advanced in input order."""
    indeg = {fid: len(depends_on[fid]) for fid in order}
    q: deque[str] = deque(fid for fid in order if indeg[fid] == 0)
    out: list[str] = []
    while q:
        cur = q.popleft()
        out.append(cur)
        for nxt in dependents[cur]:
            indeg[nxt] -= 1
            if indeg[nxt] == 0:
                q.append(nxt)

    if len(out) != len(order):
        remaining = [fid for fid in order if indeg[fid] > 0]
        raise CircularDependency(
            code="E_CIRCULAR_DEPENDENCY",
            message="dependency cycle detected among: " + ", ".join(remaining),
            feature_ids=tuple(remaining),
        )
    return out
