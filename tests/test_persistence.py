"""Tests for the task list codec and storage ports."""

import json
from pathlib import Path
from urllib.parse import quote, unquote

import httpx
import pytest

from todolist.models import MalformedTaskData, Task
from todolist.persistence import (
    CookiePort,
    JsonFilePort,
    MemoryPort,
    decode_tasks,
    encode_tasks,
)

SAMPLE = [Task("Write docs", False), Task("Ship it", True)]


def test_encode_uses_zero_one_flags():
    records = json.loads(encode_tasks(SAMPLE))
    assert records == [
        {"name": "Write docs", "completed": 0},
        {"name": "Ship it", "completed": 1},
    ]


def test_decode_preserves_order_and_content():
    assert decode_tasks(encode_tasks(SAMPLE)) == SAMPLE


def test_decode_accepts_boolean_and_string_flags():
    blob = '[{"name": "a", "completed": true}, {"name": "b", "completed": "0"}]'
    assert decode_tasks(blob) == [Task("a", True), Task("b", False)]


def test_decode_defaults_missing_flag_to_active():
    assert decode_tasks('[{"name": "a"}]') == [Task("a", False)]


@pytest.mark.parametrize(
    "blob",
    [
        None,
        "",
        "not json at all",
        "{}",
        '{"name": "a", "completed": 0}',
        "42",
        '["a", "b"]',
        '[{"name": 3, "completed": 0}]',
        '[{"name": "", "completed": 0}]',
        '[{"name": "a", "completed": 2}]',
        '[{"name": "a", "completed": "yes"}]',
        '[{"name": "ok", "completed": 0}, {"completed": 1}]',
    ],
)
def test_decode_malformed_degrades_to_empty(blob):
    assert decode_tasks(blob) == []


def test_decode_strict_raises():
    with pytest.raises(MalformedTaskData):
        decode_tasks("not json", strict=True)
    with pytest.raises(MalformedTaskData):
        decode_tasks('[{"name": "a", "completed": 7}]', strict=True)


def test_memory_port_round_trip():
    port = MemoryPort()
    assert port.load() == []
    port.save(SAMPLE)
    assert port.load() == SAMPLE


class TestJsonFilePort:
    def test_missing_file_loads_empty(self, tmp_path: Path):
        port = JsonFilePort(tmp_path / "missing.json")
        assert port.load() == []

    def test_round_trip(self, tmp_path: Path):
        port = JsonFilePort(tmp_path / "nested" / "list.json")
        port.save(SAMPLE)
        assert port.load() == SAMPLE

    def test_corrupt_file_loads_empty(self, tmp_path: Path):
        f = tmp_path / "list.json"
        f.write_text("[{broken", encoding="utf-8")
        assert JsonFilePort(f).load() == []

    def test_save_overwrites_whole_list(self, tmp_path: Path):
        f = tmp_path / "list.json"
        port = JsonFilePort(f)
        port.save(SAMPLE)
        port.save([Task("Only one")])
        assert json.loads(f.read_text(encoding="utf-8")) == [
            {"name": "Only one", "completed": 0}
        ]


class TestCookiePort:
    def test_missing_cookie_loads_empty(self):
        assert CookiePort(httpx.Cookies()).load() == []

    def test_round_trip(self):
        cookies = httpx.Cookies()
        CookiePort(cookies, path="/todo").save(SAMPLE)
        assert CookiePort(cookies, path="/todo").load() == SAMPLE

    def test_default_slot_name(self):
        cookies = httpx.Cookies()
        CookiePort(cookies).save(SAMPLE)
        assert "todo_task_list" in [c.name for c in cookies.jar]

    def test_lists_are_scoped_by_path(self):
        cookies = httpx.Cookies()
        CookiePort(cookies, path="/a").save([Task("on a")])
        CookiePort(cookies, path="/b").save([Task("on b")])
        assert CookiePort(cookies, path="/a").load() == [Task("on a")]
        assert CookiePort(cookies, path="/b").load() == [Task("on b")]
        assert CookiePort(cookies, path="/c").load() == []

    def test_save_replaces_previous_value(self):
        cookies = httpx.Cookies()
        port = CookiePort(cookies)
        port.save(SAMPLE)
        port.save([])
        assert port.load() == []
        assert len([c for c in cookies.jar if c.name == "todo_task_list"]) == 1

    def test_corrupt_cookie_loads_empty(self):
        cookies = httpx.Cookies()
        cookies.set("todo_task_list", "%%%", path="/")
        assert CookiePort(cookies).load() == []


def test_decode_deeply_nested_degrades_to_empty():
    assert decode_tasks("[" * 100000) == []


def test_decode_deeply_nested_strict_raises():
    with pytest.raises(MalformedTaskData):
        decode_tasks("[" * 100000, strict=True)


class TestJsonFilePortAtomicSave:
    def test_failed_write_keeps_previous_list(self, tmp_path: Path, monkeypatch):
        f = tmp_path / "list.json"
        port = JsonFilePort(f)
        port.save(SAMPLE)

        def broken_encode(tasks):
            raise OSError("disk full")

        monkeypatch.setattr("todolist.persistence.encode_tasks", broken_encode)
        with pytest.raises(OSError):
            port.save([Task("lost")])

        assert port.load() == SAMPLE
        assert [p.name for p in tmp_path.iterdir()] == ["list.json"]

    def test_failed_replace_leaves_no_temp_file(self, tmp_path: Path, monkeypatch):
        f = tmp_path / "list.json"
        port = JsonFilePort(f)
        port.save(SAMPLE)

        def broken_replace(src, dst):
            raise OSError("cross-device link")

        monkeypatch.setattr("todolist.persistence.os.replace", broken_replace)
        with pytest.raises(OSError):
            port.save([Task("lost")])

        assert port.load() == SAMPLE
        assert [p.name for p in tmp_path.iterdir()] == ["list.json"]


class TestCookieWireFormat:
    """The cookie value travels URL-encoded in Set-Cookie and Cookie headers."""

    def test_loads_list_from_set_cookie_header(self):
        blob = '[{"name": "A", "completed": 0}, {"name": "B; C", "completed": 1}]'
        request = httpx.Request("GET", "https://example.com/todo")
        response = httpx.Response(
            200,
            headers={"Set-Cookie": f"todo_task_list={quote(blob)}; Path=/todo"},
            request=request,
        )
        cookies = httpx.Cookies()
        cookies.extract_cookies(response)

        assert CookiePort(cookies, path="/todo").load() == [
            Task("A", False),
            Task("B; C", True),
        ]

    def test_cookie_header_round_trips_separators(self):
        cookies = httpx.Cookies()
        CookiePort(cookies).save([Task("milk; eggs"), Task("a, b = c", True)])

        request = httpx.Request("GET", "https://example.com/")
        cookies.set_cookie_header(request)
        header = request.headers["Cookie"]

        assert header.count(";") == 0
        name, _, value = header.partition("=")
        assert name == "todo_task_list"
        assert decode_tasks(unquote(value)) == [
            Task("milk; eggs"),
            Task("a, b = c", True),
        ]

    def test_stored_value_is_url_encoded(self):
        cookies = httpx.Cookies()
        CookiePort(cookies).save([Task("A")])
        assert cookies.get("todo_task_list") == quote(
            '[{"name": "A", "completed": 0}]', safe=""
        )
