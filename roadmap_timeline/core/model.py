from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Literal, Optional


FeatureStatus = Literal["backlog", "active", "blocked", "complete"]
FeaturePriority = Literal["P0", "P1", "P2"]

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class Feature:
    id: str
    title: str
    depends_on: tuple[str, ...] = ()

    effort_estimate_weeks: Optional[float] = None
    duration_days: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    status: FeatureStatus = "backlog"
    priority: Optional[FeaturePriority] = None
    description: Optional[str] = None

    def resolved_duration_days(self) -> Optional[int]:
        """Whole-day size of the feature, or None when nothing usable is set.

        Precedence: duration_days, then end_date - start_date, then the week
        estimate rounded up to whole days.
        """
        if self.duration_days is not None:
            return self.duration_days
        if self.start_date is not None and self.end_date is not None:
            return (self.end_date - self.start_date).days
        if self.effort_estimate_weeks is not None:
            days = self.effort_estimate_weeks * DAYS_PER_WEEK
            if isinstance(days, float) and not math.isfinite(days):
                return None
            return math.ceil(days)
        return None


@dataclass(frozen=True)
class FeatureGraph:
    features_by_id: dict[str, Feature]
    order: list[str]  # stable input order
    depends_on: dict[str, tuple[str, ...]]
    dependents: dict[str, tuple[str, ...]]
    durations: dict[str, int]
    topo_order: list[str]

    @property
    def roots(self) -> list[str]:
        return [fid for fid in self.order if not self.depends_on[fid]]

    @property
    def terminals(self) -> list[str]:
        return [fid for fid in self.order if not self.dependents[fid]]


@dataclass(frozen=True)
class DependencyChain:
    feature_id: str
    chain: list[str]
    depth: int


@dataclass(frozen=True)
class ScheduledFeature:
    feature: Feature
    duration_days: int
    earliest_start: date
    earliest_finish: date
    latest_start: date
    latest_finish: date
    slack_days: int
    is_on_critical_path: bool

    @property
    def id(self) -> str:
        return self.feature.id


@dataclass(frozen=True)
class CriticalPath:
    path: list[str]
    total_duration: int
    start_date: date
    end_date: date


@dataclass(frozen=True)
class Milestone:
    date: date
    features: list[str]
    description: str


@dataclass(frozen=True)
class Overlap:
    feature1: str
    feature2: str
    overlap_days: int


@dataclass(frozen=True)
class TimelineResult:
    project_start: date
    features: list[ScheduledFeature]
    dependency_chains: list[DependencyChain]
    critical_path: Optional[CriticalPath]
    milestones: list[Milestone]
    overlaps: list[Overlap]
