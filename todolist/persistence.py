"""Serialization of the task list and the storage slots that hold it.

The list is always stored whole, as a JSON array of
`{"name": ..., "completed": 0|1}` records.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote, unquote

import httpx

from .models import MalformedTaskData, Task

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "todo_task_list"


def encode_tasks(tasks: list[Task]) -> str:
    """Serialize the full list into one blob."""
    return json.dumps([t.to_record() for t in tasks])


def decode_tasks(blob: str | bytes | None, strict: bool = False) -> list[Task]:
    """Parse a stored blob back into tasks.

    A missing slot decodes to an empty list. Anything that is not an array of
    valid records also decodes to an empty list, unless `strict` is set, in
    which case MalformedTaskData is raised.
    """
    if blob is None or blob == "" or blob == b"":
        return []
    try:
        records = json.loads(blob)
        if not isinstance(records, list):
            raise MalformedTaskData(
                f"expected an array of tasks, got {type(records).__name__}"
            )
        return [Task.from_record(r) for r in records]
    except (ValueError, RecursionError) as e:
        # json.JSONDecodeError, UnicodeDecodeError and MalformedTaskData are ValueErrors
        if strict:
            if isinstance(e, MalformedTaskData):
                raise
            raise MalformedTaskData(str(e)) from e
        logger.warning("[LOAD] discarding malformed task list: %s", e)
        return []


class MemoryPort:
    """Keeps the encoded list in process memory."""

    def __init__(self, blob: str | None = None) -> None:
        self.blob = blob

    def load(self) -> list[Task]:
        return decode_tasks(self.blob)

    def save(self, tasks: list[Task]) -> None:
        self.blob = encode_tasks(tasks)


class JsonFilePort:
    """One file on disk is one storage slot."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[Task]:
        try:
            blob = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("[LOAD] could not read %s: %s", self.path, e)
            return []
        return decode_tasks(blob)

    def save(self, tasks: list[Task]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # A failed write leaves the previous file in place
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(encode_tasks(tasks))
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("[SAVE] %d task(s) -> %s", len(tasks), self.path)


class CookiePort:
    """Stores the list in a named cookie of an httpx cookie jar.

    The cookie is scoped to `path`, so each page path gets its own list. The
    value is URL-encoded, the way `setcookie` writes it on the server side.
    """

    def __init__(
        self,
        cookies: httpx.Cookies,
        name: str = DEFAULT_SLOT,
        domain: str = "",
        path: str = "/",
    ) -> None:
        self.cookies = cookies
        self.name = name
        self.domain = domain
        self.path = path

    def load(self) -> list[Task]:
        for cookie in self.cookies.jar:
            if cookie.name == self.name and cookie.path == self.path:
                if not self.domain or cookie.domain == self.domain:
                    return decode_tasks(unquote(cookie.value or ""))
        return []

    def save(self, tasks: list[Task]) -> None:
        value = quote(encode_tasks(tasks), safe="")
        self.cookies.set(self.name, value, domain=self.domain, path=self.path)
        logger.debug("[SAVE] %d task(s) -> cookie %s (path %s)", len(tasks), self.name, self.path)
