"""Resolve named UI triggers into typed actions."""

from __future__ import annotations

import logging
import re

from .models import (
    Action,
    Add,
    ClearCompleted,
    Filter,
    Remove,
    Rename,
    Toggle,
    ToggleAll,
)

logger = logging.getLogger(__name__)

# Fixed trigger names
ADD_TASK = "add-task"
CLEAR_COMPLETED = "clear-completed"
SELECT_ALL = "select_all"
FILTERS = "filters"

# Regex patterns
RE_VERB_INDEX = re.compile(r"^(.+)-([^-]*)$")
RE_INDEX = re.compile(r"^[0-9]+$")
RE_ROW_CHECKBOX = re.compile(r"^tasks\[([0-9]+)\]\[completed\]$")

ROW_VERBS = {"edit", "update", "remove"}

_TRUE_VALUES = {"1", "true", "on", "yes"}


class ActionDispatcher:
    """Turns `(trigger, payload)` pairs into actions.

    Also remembers which row, if any, the last trigger put into edit mode.
    That state lasts for one render: the next trigger replaces it, so an
    update (or any other event) returns the row to normal display.
    """

    def __init__(self) -> None:
        self.editing_index: int | None = None

    def resolve(self, trigger: str | None, payload: object = None) -> Action | None:
        """Map one trigger to an action, or None if it mutates nothing."""
        self.editing_index = None
        if not trigger:
            return None

        # Fixed names take priority over the verb-index pattern
        if trigger == ADD_TASK:
            return Add(_text(payload))
        if trigger == CLEAR_COMPLETED:
            return ClearCompleted()
        if trigger == SELECT_ALL:
            return ToggleAll(parse_checkbox(payload))
        if trigger == FILTERS:
            return None

        m = RE_ROW_CHECKBOX.match(trigger)
        if m:
            return Toggle(int(m.group(1)), parse_checkbox(payload))

        parsed = parse_verb_index(trigger)
        if parsed is None:
            logger.debug("[DISPATCH] unrecognized trigger %r", trigger)
            return None

        verb, index = parsed
        if verb == "edit":
            self.editing_index = index
            return None
        if verb == "update":
            return Rename(index, _text(payload))
        return Remove(index)

    def is_editing(self, index: int) -> bool:
        return self.editing_index == index


def parse_verb_index(trigger: str) -> tuple[str, int] | None:
    """Split `<verb>-<index>` on its last dash.

    Returns None when the trailing segment is not a non-negative integer or
    the verb is not a known row verb.
    """
    m = RE_VERB_INDEX.match(trigger)
    if not m:
        return None
    verb, tail = m.group(1), m.group(2)
    if not RE_INDEX.fullmatch(tail) or verb not in ROW_VERBS:
        return None
    return verb, int(tail)


def parse_checkbox(payload: object) -> bool:
    """Interpret a checkbox payload. Anything unrecognized is unchecked."""
    if isinstance(payload, bool):
        return payload
    if isinstance(payload, int):
        return payload != 0
    if isinstance(payload, str):
        return payload.strip().lower() in _TRUE_VALUES
    return False


def parse_filter(value: object) -> Filter:
    """Map the filter selector value (`all`, `0`, `1`) to a Filter.

    Missing or unknown values fall back to showing every task.
    """
    if isinstance(value, Filter):
        return value
    if value is None:
        return Filter.ALL
    try:
        return Filter(str(value).strip().lower())
    except ValueError:
        logger.debug("[DISPATCH] unknown filter %r, showing all", value)
        return Filter.ALL


def _text(payload: object) -> str:
    return payload if isinstance(payload, str) else ""
