from __future__ import annotations

from typing import Optional

from roadmap_timeline.core.model import DependencyChain, FeatureGraph


def dependency_chains(graph: FeatureGraph) -> list[DependencyChain]:
    """Longest upstream lineage for every feature, in input order.

    depth(f) = 0 without dependencies, else 1 + max(depth(d)). When several
    dependencies share the max depth, the one earliest in input order wins.
    """

    position = {fid: i for i, fid in enumerate(graph.order)}
    depth: dict[str, int] = {}
    parent: dict[str, Optional[str]] = {}

    for fid in graph.topo_order:
        deps = sorted(graph.depends_on[fid], key=lambda d: position[d])
        best: Optional[str] = None
        for dep in deps:
            if best is None or depth[dep] > depth[best]:
                best = dep
        parent[fid] = best
        depth[fid] = 0 if best is None else depth[best] + 1

    out: list[DependencyChain] = []
    for fid in graph.order:
        chain: list[str] = []
        cur: Optional[str] = fid
        while cur is not None:
            chain.append(cur)
            cur = parent[cur]
        chain.reverse()
        out.append(DependencyChain(feature_id=fid, chain=chain, depth=depth[fid]))
    return out
