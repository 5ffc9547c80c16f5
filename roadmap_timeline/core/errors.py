from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TimelineError(Exception):
    """Base error envelope. Prefer returning/printing these rather than raising raw exceptions."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None
    feature_ids: tuple[str, ...] = ()

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<timeline>"
        return f"{loc}: {self.code}: {self.message}"


class TimelineLoadError(TimelineError):
    pass


class TimelineValidationError(TimelineError):
    pass


# Raised by the engine. Any of these invalidates the whole timeline.


class UnknownDependency(TimelineValidationError):
    pass


class CircularDependency(TimelineValidationError):
    pass


class InvalidDuration(TimelineValidationError):
    pass


class DuplicateFeature(TimelineValidationError):
    pass


class ScheduleInvariantError(RuntimeError):
    """CPM produced a state that is impossible on a DAG (e.g. negative slack)."""
