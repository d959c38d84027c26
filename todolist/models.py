"""Data models for the task list, its derived view, and the actions applied to it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class MalformedTaskData(ValueError):
    """Raised when a persisted record does not describe a valid task."""


@dataclass
class Task:
    """A single task. Its identity is its position in the list."""

    name: str
    completed: bool = False

    @classmethod
    def from_record(cls, record: object) -> Task:
        """Build a Task from a decoded `{name, completed}` record.

        `completed` may be a bool or the 0/1 encoding (int or string).
        """
        if not isinstance(record, dict):
            raise MalformedTaskData(f"task record is not an object: {record!r}")
        name = record.get("name")
        if not isinstance(name, str) or not name.strip():
            raise MalformedTaskData(f"task name must be a non-empty string: {name!r}")
        return cls(name=name, completed=_coerce_completed(record.get("completed", 0)))

    def to_record(self) -> dict:
        return {"name": self.name, "completed": 1 if self.completed else 0}


def _coerce_completed(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw in (0, 1, "0", "1"):
        return raw in (1, "1")
    raise MalformedTaskData(f"completed flag must be 0/1 or a boolean: {raw!r}")


class Filter(Enum):
    """Which rows a view shows. Values match the filter selector options."""

    ALL = "all"
    ACTIVE = "0"
    COMPLETED = "1"

    def matches(self, task: Task) -> bool:
        if self is Filter.ACTIVE:
            return not task.completed
        if self is Filter.COMPLETED:
            return task.completed
        return True


@dataclass
class DerivedView:
    """Read-only projection of the list for one render cycle.

    Counts always cover the full list; only `rows` depends on the filter.
    """

    filter: Filter
    rows: list[tuple[int, Task]] = field(default_factory=list)
    active_count: int = 0
    completed_count: int = 0

    @property
    def visible_tasks(self) -> list[Task]:
        return [task for _, task in self.rows]

    @property
    def total(self) -> int:
        return self.active_count + self.completed_count

    @property
    def all_completed(self) -> bool:
        return self.active_count == 0 and self.total > 0

    @property
    def show_footer(self) -> bool:
        return self.total > 0

    @property
    def show_clear_completed(self) -> bool:
        return self.completed_count > 0

    @property
    def items_left_label(self) -> str:
        noun = "item" if self.active_count == 1 else "items"
        return f"{self.active_count} {noun} left"


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Add:
    name: str


@dataclass(frozen=True)
class Rename:
    index: int
    name: str


@dataclass(frozen=True)
class Toggle:
    index: int
    completed: bool


@dataclass(frozen=True)
class ToggleAll:
    completed: bool


@dataclass(frozen=True)
class Remove:
    index: int


@dataclass(frozen=True)
class ClearCompleted:
    pass


Action = Union[Add, Rename, Toggle, ToggleAll, Remove, ClearCompleted]
