"""One interaction cycle: decode a trigger, apply it, save, re-derive the view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .dispatcher import FILTERS, ActionDispatcher, parse_filter
from .models import DerivedView, Filter
from .store import ApplyResult, TaskStore

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Everything the presentation layer needs after one cycle."""

    applied: ApplyResult
    view: DerivedView
    editing_index: int | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def filter(self) -> Filter:
        return self.view.filter

    def is_editing(self, index: int) -> bool:
        return self.editing_index == index


def run_cycle(
    store: TaskStore,
    dispatcher: ActionDispatcher,
    trigger: str | None = None,
    payload: object = None,
    task_filter: object = None,
) -> CycleResult:
    """Run a single trigger through the store and return the fresh view.

    Args:
        store: The list instance to mutate
        dispatcher: Resolves the trigger and tracks edit mode
        trigger: Name of the control that fired, or None for a plain render
        payload: Value submitted with the trigger (text field, checkbox, or
            the filter selector value when the trigger is the selector)
        task_filter: Filter selector value (`all`, `0`, `1` or a Filter). When
            omitted and the selector itself fired, its payload is used.
    """
    action = dispatcher.resolve(trigger, payload)
    applied = store.apply(action)
    if task_filter is None and trigger == FILTERS:
        task_filter = payload
    view = store.view(parse_filter(task_filter))

    if action is not None:
        logger.info(
            "%s: %d task(s), %s",
            type(action).__name__, view.total, view.items_left_label,
        )
    for warning in applied.warnings:
        logger.warning("  - %s", warning)

    return CycleResult(
        applied=applied,
        view=view,
        editing_index=dispatcher.editing_index,
        warnings=list(applied.warnings),
    )
