from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from roadmap_timeline.core.errors import InvalidDuration, ScheduleInvariantError
from roadmap_timeline.core.model import CriticalPath, FeatureGraph, ScheduledFeature


logger = logging.getLogger(__name__)


def schedule_graph(
    graph: FeatureGraph, project_start: date
) -> tuple[list[ScheduledFeature], Optional[CriticalPath]]:
    """Two-pass CPM over a validated graph.

    Durations are raw calendar days; finish dates are exclusive
    (earliest_finish = earliest_start + duration). Returned features keep the
    input order.
    """

    if not graph.order:
        return [], None

    dur = graph.durations

    # Forward pass.
    es: dict[str, date] = {}
    ef: dict[str, date] = {}
    for fid in graph.topo_order:
        deps = graph.depends_on[fid]
        es[fid] = max(ef[d] for d in deps) if deps else project_start
        try:
            ef[fid] = es[fid] + timedelta(days=dur[fid])
        except OverflowError as e:
            raise InvalidDuration(
                code="E_INVALID_DURATION",
                message=f"feature {fid} would finish after {date.max.isoformat()} (duration {dur[fid]} days)",
                path=f"features[{graph.order.index(fid)}]",
                feature_ids=(fid,),
            ) from e

    project_finish = max(ef.values())

    # Backward pass.
    ls: dict[str, date] = {}
    lf: dict[str, date] = {}
    for fid in reversed(graph.topo_order):
        succ = graph.dependents[fid]
        lf[fid] = min(ls[s] for s in succ) if succ else project_finish
        ls[fid] = lf[fid] - timedelta(days=dur[fid])

    scheduled: list[ScheduledFeature] = []
    slack: dict[str, int] = {}
    for fid in graph.order:
        slack_days = (ls[fid] - es[fid]).days
        if slack_days < 0:
            raise ScheduleInvariantError(f"negative slack ({slack_days}) for feature {fid}")
        slack[fid] = slack_days
        scheduled.append(
            ScheduledFeature(
                feature=graph.features_by_id[fid],
                duration_days=dur[fid],
                earliest_start=es[fid],
                earliest_finish=ef[fid],
                latest_start=ls[fid],
                latest_finish=lf[fid],
                slack_days=slack_days,
                is_on_critical_path=slack_days == 0,
            )
        )

    path = _longest_zero_slack_path(graph, slack, es)
    critical = CriticalPath(
        path=path,
        total_duration=sum(dur[fid] for fid in path),
        start_date=es[path[0]],
        end_date=ef[path[-1]],
    )
    logger.debug(
        "scheduled %d features, finish=%s, critical=%s",
        len(scheduled),
        project_finish.isoformat(),
        " -> ".join(path),
    )
    return scheduled, critical


def _longest_zero_slack_path(
    graph: FeatureGraph, slack: dict[str, int], es: dict[str, date]
) -> list[str]:
    """Longest (by duration) root-to-terminal chain of zero-slack features.

    Candidates are ranked by (-total duration, [(earliest_start, id), ...]) so
    equal-length paths resolve by earliest start, then by id.
    """

    best: dict[str, tuple[int, list[str]]] = {}

    def rank(total: int, path: list[str]) -> tuple[int, list[tuple[date, str]]]:
        return (-total, [(es[fid], fid) for fid in path])

    for fid in graph.topo_order:
        if slack[fid] != 0:
            continue
        candidates: list[tuple[int, list[str]]] = []
        for dep in graph.depends_on[fid]:
            if dep in best:
                total, path = best[dep]
                candidates.append((total + graph.durations[fid], path + [fid]))
        if not graph.depends_on[fid]:
            candidates.append((graph.durations[fid], [fid]))
        if candidates:
            best[fid] = min(candidates, key=lambda c: rank(*c))

    ends = [best[fid] for fid in graph.terminals if fid in best]
    if not ends:
        raise ScheduleInvariantError("no zero-slack terminal feature found")
    _, path = min(ends, key=lambda c: rank(*c))
    return path
