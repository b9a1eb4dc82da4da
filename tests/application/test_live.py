from __future__ import annotations

import io
import threading

import pytest

from lib_live_config import ConfigKeyError, ParseError, SourceNotFound, empty, exact, load, prefix, reload


def make_config(memory_reader, parser, *roots):
    return load(roots, reader=memory_reader, parser=parser, environ={})


def test_initial_load_publishes_without_notifying(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1\nb = 2")
    config = make_config(memory_reader, parser, "app.cfg")
    assert dict(config.snapshot()) == {"a": 1, "b": 2}


def test_missing_required_root_fails_the_load(memory_reader, parser) -> None:
    with pytest.raises(SourceNotFound):
        make_config(memory_reader, parser, "nofile.cfg")


def test_reload_notifies_exact_and_prefix_subscribers(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1\nb = 2")
    config = make_config(memory_reader, parser, "app.cfg")
    exact_calls: list = []
    prefix_calls: list = []
    config.subscribe(exact("b"), lambda name, value: exact_calls.append((name, value)))
    config.subscribe(prefix(""), lambda name, value: prefix_calls.append((name, value)))

    memory_reader.write("app.cfg", "a = 1\nb = 3\nc = 4")
    diff = reload(config)

    assert exact_calls == [("b", 3)]
    assert sorted(prefix_calls) == [("b", 3), ("c", 4)]
    assert diff.names() == ["b", "c"]
    assert config.lookup("c") == 4


def test_reload_reports_removed_names(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1")
    config = make_config(memory_reader, parser, "app.cfg")
    calls: list = []
    config.subscribe(exact("a"), lambda name, value: calls.append((name, value)))
    memory_reader.write("app.cfg", "")
    config.reload()
    assert calls == [("a", None)]
    assert config.lookup("a") is None


def test_failed_reload_keeps_previous_snapshot(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1")
    config = make_config(memory_reader, parser, "app.cfg")
    calls: list = []
    config.subscribe(prefix(""), lambda name, value: calls.append(name))
    before = config.snapshot()

    memory_reader.write("app.cfg", "a = = 2")
    with pytest.raises(ParseError):
        config.reload()
    assert config.snapshot() is before

    memory_reader.remove("app.cfg")
    with pytest.raises(SourceNotFound):
        config.reload()
    assert config.lookup("a") == 1
    assert calls == []


def test_reload_without_changes_notifies_nobody(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1")
    config = make_config(memory_reader, parser, "app.cfg")
    calls: list = []
    config.subscribe(prefix(""), lambda name, value: calls.append(name))
    assert not config.reload()
    assert calls == []


def test_handler_errors_go_to_configured_sink(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1")
    errors: list[BaseException] = []
    config = load(["app.cfg"], reader=memory_reader, parser=parser, environ={}, on_error=errors.append)
    seen: list = []

    def explode(name, value):
        raise RuntimeError("broken subscriber")

    config.subscribe(exact("a"), explode)
    config.subscribe(exact("a"), lambda name, value: seen.append(value))
    memory_reader.write("app.cfg", "a = 2")
    config.reload()
    assert seen == [2]
    assert [str(error) for error in errors] == ["broken subscriber"]


def test_handler_may_read_the_new_snapshot(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1")
    config = make_config(memory_reader, parser, "app.cfg")
    seen: list = []
    config.subscribe(exact("a"), lambda name, value: seen.append(config.lookup(name)))
    memory_reader.write("app.cfg", "a = 7")
    config.reload()
    assert seen == [7]


def test_handler_may_trigger_a_nested_reload(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1")
    config = make_config(memory_reader, parser, "app.cfg")
    nested: list = []
    config.subscribe(exact("a"), lambda name, value: nested.append(bool(config.reload())))
    memory_reader.write("app.cfg", "a = 2")
    config.reload()
    assert nested == [False]


def test_lookup_conversions(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", 'port = 8080\nname = "svc"\nflags = [1, 2]\ndebug = on')
    config = make_config(memory_reader, parser, "app.cfg")
    assert config.lookup("port") == 8080
    assert config.lookup("port", float) == 8080.0
    assert config.lookup("port", str) is None
    assert config.lookup("name", bytes) == b"svc"
    assert config.lookup("flags", list) == [1, 2]
    assert config.lookup("flags", tuple) == (1, 2)
    assert config.lookup("debug", bool) is True
    assert config.lookup("debug", int) is None
    assert config.lookup("missing") is None


def test_require_raises_key_error_naming_the_key(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", 'name = "svc"')
    config = make_config(memory_reader, parser, "app.cfg")
    assert config.require("name") == "svc"
    with pytest.raises(ConfigKeyError) as info:
        config.require("name", int)
    assert info.value.name == "name"
    with pytest.raises(KeyError):
        config.require("missing")


def test_lookup_default_uses_type_of_default(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", 'port = 8080\nname = "svc"')
    config = make_config(memory_reader, parser, "app.cfg")
    assert config.lookup_default(1, "port") == 8080
    assert config.lookup_default(1, "name") == 1
    assert config.lookup_default("x", "missing") == "x"
    assert config.lookup_default(0.5, "port") == 8080.0


def test_display_lists_bindings_sorted(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", 'b = "two"\na = 1')
    config = make_config(memory_reader, parser, "app.cfg")
    stream = io.StringIO()
    config.display(stream)
    assert stream.getvalue() == "a = 1\nb = 'two'\n"


def test_empty_handles_are_independent() -> None:
    first = empty()
    second = empty()
    assert first is not second
    assert len(first.snapshot()) == 0
    calls: list = []
    first.subscribe(prefix(""), lambda name, value: calls.append(name))
    assert not second.reload()
    assert not first.reload()
    assert calls == []


def test_sources_track_every_visited_reference(memory_reader, parser) -> None:
    memory_reader.write("root.cfg", 'import "child.cfg"')
    memory_reader.write("child.cfg", "c = 1")
    config = make_config(memory_reader, parser, "root.cfg")
    assert sorted(config.sources.resolved_paths()) == ["child.cfg", "root.cfg"]
    assert "keys=1" in repr(config)


class GatedReader:
    """Wrap a reader so the first read after ``arm()`` blocks until ``release`` is set."""

    def __init__(self, inner) -> None:
        self._inner = inner
        self._armed = False
        self.entered = threading.Event()
        self.release = threading.Event()

    def arm(self) -> None:
        self._armed = True

    def read(self, path: str) -> bytes:
        if self._armed:
            self._armed = False
            self.entered.set()
            self.release.wait(10.0)
        return self._inner.read(path)

    def stat(self, path: str) -> tuple[int, float]:
        return self._inner.stat(path)


def test_concurrent_reloads_are_serialized(memory_reader, parser) -> None:
    memory_reader.write("app.cfg", "a = 1")
    reader = GatedReader(memory_reader)
    config = load(["app.cfg"], reader=reader, parser=parser, environ={})
    calls: list = []
    config.subscribe(prefix(""), lambda name, value: calls.append((name, value)))
    diffs: list = []

    memory_reader.write("app.cfg", "a = 2\nb = 1")
    reader.arm()
    first = threading.Thread(target=lambda: diffs.append(config.reload()))
    second = threading.Thread(target=lambda: diffs.append(config.reload()))
    first.start()
    assert reader.entered.wait(10.0)
    second.start()
    second.join(0.2)
    assert second.is_alive()

    reader.release.set()
    first.join(10.0)
    second.join(10.0)

    assert sorted(calls) == [("a", 2), ("b", 1)]
    assert sorted(bool(diff) for diff in diffs) == [False, True]
    assert dict(config.snapshot()) == {"a": 2, "b": 1}
