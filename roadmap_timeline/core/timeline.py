from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from roadmap_timeline.core.chains.dependency_chains import dependency_chains
from roadmap_timeline.core.graph.build_graph import build_graph
from roadmap_timeline.core.model import Feature, TimelineResult
from roadmap_timeline.core.report.milestones import milestones, overlaps
from roadmap_timeline.core.schedule.critical_path import schedule_graph


logger = logging.getLogger(__name__)


def schedule(
    features: Iterable[Feature],
    project_start: date,
    *,
    min_overlap_days: int = 1,
    include_overlaps: bool = True,
) -> TimelineResult:
    """Compute the full timeline for a feature snapshot.

    Pure: the same input always yields an identical result. Graph errors
    (UnknownDependency, CircularDependency, InvalidDuration, DuplicateFeature)
    propagate unchanged and no partial result is produced.
    """

    graph = build_graph(features)
    chains = dependency_chains(graph)
    scheduled, critical = schedule_graph(graph, project_start)

    result = TimelineResult(
        project_start=project_start,
        features=scheduled,
        dependency_chains=chains,
        critical_path=critical,
        milestones=milestones(scheduled),
        overlaps=overlaps(scheduled, min_overlap_days) if include_overlaps else [],
    )
    logger.debug(
        "timeline: %d features, %d milestones, %d overlaps",
        len(result.features),
        len(result.milestones),
        len(result.overlaps),
    )
    return result
