from __future__ import annotations

from datetime import date
from typing import Sequence

from roadmap_timeline.core.model import Milestone, Overlap, ScheduledFeature


def milestones(scheduled: Sequence[ScheduledFeature]) -> list[Milestone]:
    """One milestone per distinct earliest_finish date, ascending."""
    by_date: dict[date, list[str]] = {}
    for sf in scheduled:
        by_date.setdefault(sf.earliest_finish, []).append(sf.id)

    return [
        Milestone(date=d, features=ids, description=_describe(len(ids)))
        for d, ids in sorted(by_date.items())
    ]


def overlaps(scheduled: Sequence[ScheduledFeature], min_overlap_days: int = 1) -> list[Overlap]:
    """Pairwise interval intersection of scheduled features.

    O(n^2) scan; each unordered pair appears at most once, in input order.
    """
    threshold = max(1, min_overlap_days)
    out: list[Overlap] = []
    for i, a in enumerate(scheduled):
        for b in scheduled[i + 1 :]:
            days = overlap_days(a, b)
            if days >= threshold:
                out.append(Overlap(feature1=a.id, feature2=b.id, overlap_days=days))
    return out


def overlap_days(a: ScheduledFeature, b: ScheduledFeature) -> int:
    start = max(a.earliest_start, b.earliest_start)
    finish = min(a.earliest_finish, b.earliest_finish)
    return max(0, (finish - start).days)


def _describe(count: int) -> str:
    noun = "feature" if count == 1 else "features"
    return f"{count} {noun} completing"
