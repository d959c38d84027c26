"""CLI entry point for todolist."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .cycle import CycleResult, run_cycle
from .dispatcher import ActionDispatcher
from .persistence import DEFAULT_SLOT, JsonFilePort
from .store import TaskStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="todolist",
        description="Apply one action to a task list stored in a JSON file and print it.",
    )
    parser.add_argument(
        "trigger",
        type=str,
        nargs="?",
        default=None,
        help="Control that fired, e.g. 'add-task', 'remove-2', 'tasks[0][completed]', "
        "'select_all', 'clear-completed'. Omit to just print the list.",
    )
    parser.add_argument(
        "--value",
        type=str,
        default=None,
        help="Payload for the trigger (task text, or 1/0 for checkboxes)",
    )
    parser.add_argument(
        "--file",
        type=str,
        default=None,
        help=f"Path to the task list (or set TODOLIST_FILE; default {DEFAULT_SLOT}.json)",
    )
    parser.add_argument(
        "--filter",
        choices=["all", "0", "1"],
        default=None,
        help="Rows to show: all (default), 0 (active) or 1 (completed)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Write the resulting view to a JSON file",
    )

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    # Resolve list file
    list_path = args.file or os.environ.get("TODOLIST_FILE") or f"{DEFAULT_SLOT}.json"
    list_path = Path(list_path)
    if list_path.is_dir():
        logging.error("Task list path is a directory: %s", list_path)
        return 1

    store = TaskStore(JsonFilePort(list_path))
    result = run_cycle(
        store,
        ActionDispatcher(),
        trigger=args.trigger,
        payload=args.value,
        task_filter=args.filter,
    )

    print(render_text(result))

    if args.output_json:
        Path(args.output_json).write_text(json.dumps(view_to_dict(result), indent=2))
        logging.info("View written to %s", args.output_json)

    return 1 if result.warnings else 0


def render_text(result: CycleResult) -> str:
    """Plain-text rendering of a cycle's view."""
    view = result.view
    lines = [f"[{'x' if view.all_completed else ' '}] todos"]
    for index, task in view.rows:
        if result.is_editing(index):
            lines.append(f"  {index}. (editing) {task.name}")
        else:
            mark = "x" if task.completed else " "
            lines.append(f"  {index}. [{mark}] {task.name}")
    if view.show_footer:
        footer = f"{view.items_left_label} | filter: {view.filter.name.lower()}"
        if view.show_clear_completed:
            footer += f" | {view.completed_count} completed"
        lines.append(footer)
    return "\n".join(lines)


def view_to_dict(result: CycleResult) -> dict:
    view = result.view
    return {
        "filter": view.filter.value,
        "tasks": [
            {"index": i, "name": t.name, "completed": t.completed} for i, t in view.rows
        ],
        "active_count": view.active_count,
        "completed_count": view.completed_count,
        "all_completed": view.all_completed,
        "editing_index": result.editing_index,
        "warnings": result.warnings,
    }


if __name__ == "__main__":
    sys.exit(main())
