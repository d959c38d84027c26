"""Task store: applies actions to the ordered task list and derives views."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Protocol

from .models import (
    Action,
    Add,
    ClearCompleted,
    DerivedView,
    Filter,
    Remove,
    Rename,
    Task,
    Toggle,
    ToggleAll,
)

logger = logging.getLogger(__name__)


class TaskListPort(Protocol):
    """Storage slot holding one whole serialized task list.

    `load` never raises for missing or corrupt data; it returns an empty list.
    `save` may raise; the store reports that as a warning.
    """

    def load(self) -> list[Task]: ...

    def save(self, tasks: list[Task]) -> None: ...


@dataclass
class ApplyResult:
    """Summary of what one apply did."""

    action: Action | None = None
    changed: bool = False
    saved: bool = False
    warnings: list[str] = field(default_factory=list)


class TaskStore:
    """Owns the ordered task list for one list instance.

    Every mutation goes through `apply`, which always persists the full list
    afterwards. Indices are positional: removing a task shifts every later
    task down by one, so callers must issue actions against a fresh view.
    """

    def __init__(self, port: TaskListPort) -> None:
        self.port = port
        self._lock = threading.Lock()
        try:
            self.tasks: list[Task] = list(port.load())
        except Exception as e:
            logger.warning("Could not load task list, starting empty: %s", e)
            self.tasks = []
        logger.debug("[LOAD] %d task(s)", len(self.tasks))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, name: str) -> ApplyResult:
        return self.apply(Add(name))

    def rename(self, index: int, name: str) -> ApplyResult:
        return self.apply(Rename(index, name))

    def toggle(self, index: int, completed: bool) -> ApplyResult:
        return self.apply(Toggle(index, completed))

    def toggle_all(self, completed: bool) -> ApplyResult:
        return self.apply(ToggleAll(completed))

    def remove(self, index: int) -> ApplyResult:
        return self.apply(Remove(index))

    def clear_completed(self) -> ApplyResult:
        return self.apply(ClearCompleted())

    def apply(self, action: Action | None) -> ApplyResult:
        """Apply one action, then save the whole list.

        `None` (an unrecognized trigger) is a no-op and does not save.
        """
        result = ApplyResult(action=action)
        if action is None:
            return result

        with self._lock:
            result.changed = self._mutate(action)
            try:
                self.port.save(list(self.tasks))
                result.saved = True
            except Exception as e:
                msg = f"Failed to save task list after {type(action).__name__}: {e}"
                logger.warning(msg)
                result.warnings.append(msg)
        return result

    def _mutate(self, action: Action) -> bool:
        if isinstance(action, Add):
            name = action.name.strip()
            if not name:
                logger.debug("[ADD] ignored empty name")
                return False
            self.tasks.append(Task(name=name))
            logger.debug("[ADD] '%s' at %d", name, len(self.tasks) - 1)
            return True

        if isinstance(action, ToggleAll):
            changed = any(t.completed != action.completed for t in self.tasks)
            for task in self.tasks:
                task.completed = action.completed
            logger.debug("[TOGGLE ALL] completed=%s", action.completed)
            return changed

        if isinstance(action, ClearCompleted):
            before = len(self.tasks)
            self.tasks = [t for t in self.tasks if not t.completed]
            logger.debug("[CLEAR] removed %d task(s)", before - len(self.tasks))
            return len(self.tasks) != before

        # Remaining actions address a single row by index
        if not self._in_bounds(action.index):
            logger.debug(
                "[%s] index %d out of range (%d tasks); ignored",
                type(action).__name__.upper(), action.index, len(self.tasks),
            )
            return False

        task = self.tasks[action.index]
        if isinstance(action, Rename):
            name = action.name.strip()
            if not name:
                logger.debug("[RENAME] ignored empty name for %d", action.index)
                return False
            logger.debug("[RENAME] %d: '%s' -> '%s'", action.index, task.name, name)
            changed = task.name != name
            task.name = name
            return changed

        if isinstance(action, Toggle):
            changed = task.completed != action.completed
            task.completed = action.completed
            logger.debug("[TOGGLE] %d completed=%s", action.index, action.completed)
            return changed

        if isinstance(action, Remove):
            del self.tasks[action.index]
            logger.debug("[REMOVE] %d '%s'", action.index, task.name)
            return True

        raise TypeError(f"Unknown action: {action!r}")

    def _in_bounds(self, index: int) -> bool:
        return 0 <= index < len(self.tasks)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def view(self, task_filter: Filter = Filter.ALL) -> DerivedView:
        """Project the list through a filter. Counts cover the full list."""
        completed = sum(1 for t in self.tasks if t.completed)
        return DerivedView(
            filter=task_filter,
            rows=[(i, replace(t)) for i, t in enumerate(self.tasks) if task_filter.matches(t)],
            active_count=len(self.tasks) - completed,
            completed_count=completed,
        )
