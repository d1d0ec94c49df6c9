"""Unit tests for the ``Logger`` value object.

Covers the rendered line format for every emission method, the single-slot
``at``/``step`` attributes, in-place ``replace``, timing, and the guarantee
that derived loggers never affect their parent.
"""

from __future__ import annotations

import io
from itertools import count

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_kvlog import Logger, new, new_writer


@pytest.fixture
def buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def log(buffer: io.StringIO) -> Logger:
    return new_writer("ns=test", buffer)


def _fake_clock(*readings: float):
    values = iter(readings)
    return lambda: next(values)


def test_new_keeps_namespace() -> None:
    log = new("ns=test")
    assert log.namespace == "ns=test"
    assert log.attributes == ()
    assert log.started_at is None


def test_root_logger_renders_namespace_then_message(log: Logger, buffer: io.StringIO) -> None:
    log.log("foo=bar")
    assert buffer.getvalue() == "ns=test foo=bar\n"


def test_at(log: Logger, buffer: io.StringIO) -> None:
    log.at("target").logf("foo=bar")
    assert buffer.getvalue() == "ns=test at=target foo=bar\n"


def test_at_overrides(log: Logger, buffer: io.StringIO) -> None:
    log.at("target1").at("target2").logf("foo=bar")
    assert buffer.getvalue() == "ns=test at=target2 foo=bar\n"


def test_at_override_keeps_position(log: Logger, buffer: io.StringIO) -> None:
    log.at("first").with_namespace("k=v").at("second").log("done")
    assert buffer.getvalue() == "ns=test at=second k=v done\n"


def test_step(log: Logger, buffer: io.StringIO) -> None:
    log.step("target").logf("foo=bar")
    assert buffer.getvalue() == "ns=test step=target foo=bar\n"


def test_step_overrides(log: Logger, buffer: io.StringIO) -> None:
    log.step("target1").step("target2").logf("foo=bar")
    assert buffer.getvalue() == "ns=test step=target2 foo=bar\n"


def test_at_and_step_are_independent_slots(log: Logger, buffer: io.StringIO) -> None:
    log.at("a").step("s1").at("b").step("s2").log("x=1")
    assert buffer.getvalue() == "ns=test at=b step=s2 x=1\n"


def test_at_quotes_values_with_spaces(log: Logger, buffer: io.StringIO) -> None:
    log.at("load config").log("ok")
    assert buffer.getvalue() == 'ns=test at="load config" ok\n'


def test_namespace(log: Logger, buffer: io.StringIO) -> None:
    log.with_namespace("foo=bar").with_namespace("baz=qux").logf("fred=barney")
    assert buffer.getvalue() == "ns=test foo=bar baz=qux fred=barney\n"


def test_namespace_splits_multiple_tokens(log: Logger) -> None:
    derived = log.with_namespace('a=1  msg="two words" b=2')
    assert derived.attributes == ("a=1", 'msg="two words"', "b=2")


def test_namespace_allows_repeated_keys(log: Logger, buffer: io.StringIO) -> None:
    log.with_namespace("k=1").with_namespace("k=2").log("x")
    assert buffer.getvalue() == "ns=test k=1 k=2 x\n"


def test_replace(log: Logger, buffer: io.StringIO) -> None:
    log.with_namespace("baz=qux1").replace("baz", "qux2").logf("foo=bar")
    assert buffer.getvalue() == "ns=test baz=qux2 foo=bar\n"


def test_replace_existing(log: Logger, buffer: io.StringIO) -> None:
    log.with_namespace("foo=bar").with_namespace("baz=qux").replace("baz", "zux").logf("thud=grunt")
    assert buffer.getvalue() == "ns=test foo=bar baz=zux thud=grunt\n"


def test_replace_middle_token_keeps_position(log: Logger, buffer: io.StringIO) -> None:
    log.with_namespace("a=1 b=2 c=3").replace("b", "20").log("end")
    assert buffer.getvalue() == "ns=test a=1 b=20 c=3 end\n"


def test_replace_only_first_match(log: Logger) -> None:
    derived = log.with_namespace("k=1 k=2").replace("k", "9")
    assert derived.attributes == ("k=9", "k=2")


def test_replace_missing_key_appends(log: Logger, buffer: io.StringIO) -> None:
    log.with_namespace("foo=bar").replace("baz", "qux").log("end")
    assert buffer.getvalue() == "ns=test foo=bar baz=qux end\n"


def test_replace_ignores_keys_sharing_a_prefix(log: Logger) -> None:
    derived = log.with_namespace("bazaar=1").replace("baz", "2")
    assert derived.attributes == ("bazaar=1", "baz=2")


def test_append_is_opaque(log: Logger, buffer: io.StringIO) -> None:
    log.append("with=context extra").log("foo=bar")
    assert buffer.getvalue() == "ns=test with=context extra foo=bar\n"


def test_append_blank_fragment_is_ignored(log: Logger) -> None:
    assert log.append("   ") is log


def test_append_keeps_fragment_unchanged(log: Logger, buffer: io.StringIO) -> None:
    derived = log.append(" x=1\ty=2 ")
    assert derived.attributes == (" x=1\ty=2 ",)
    derived.log("end")
    assert buffer.getvalue() == "ns=test  x=1\ty=2  end\n"


def test_log_formats_arguments(log: Logger, buffer: io.StringIO) -> None:
    log.logf("string=%q int=%d float=%0.2f", "foo", 42, 3.14159)
    assert buffer.getvalue() == 'ns=test string="foo" int=42 float=3.14\n'


def test_log_embeds_format_problems_instead_of_raising(log: Logger, buffer: io.StringIO) -> None:
    log.log("num=%d", "many")
    assert buffer.getvalue() == "ns=test num=%!d(str=many)\n"


def test_error(log: Logger, buffer: io.StringIO) -> None:
    log.error(RuntimeError("broken"))
    assert buffer.getvalue() == 'ns=test state=error error="broken"\n'


def test_error_escapes_quotes(log: Logger, buffer: io.StringIO) -> None:
    log.error(ValueError('bad "value"'))
    assert buffer.getvalue() == 'ns=test state=error error="bad \\"value\\""\n'


def test_error_without_message_uses_class_name(log: Logger, buffer: io.StringIO) -> None:
    log.error(KeyboardInterrupt())
    assert buffer.getvalue() == 'ns=test state=error error="KeyboardInterrupt"\n'


def test_error_keeps_attributes(log: Logger, buffer: io.StringIO) -> None:
    log.at("fetch").error(OSError("timeout"))
    assert buffer.getvalue() == 'ns=test at=fetch state=error error="timeout"\n'


def test_success(log: Logger, buffer: io.StringIO) -> None:
    log.successf("num=%d", 42)
    assert buffer.getvalue() == "ns=test state=success num=42\n"


def test_success_without_message(log: Logger, buffer: io.StringIO) -> None:
    log.success()
    assert buffer.getvalue() == "ns=test state=success\n"


def test_start(log: Logger, buffer: io.StringIO) -> None:
    log.start().successf("num=%d", 42)
    assert "elapsed=" in buffer.getvalue()


def test_start_renders_elapsed_between_state_and_message(buffer: io.StringIO) -> None:
    log = Logger("ns=test", buffer, clock=_fake_clock(10.0, 12.5))
    log.start().success("num=%d", 42)
    assert buffer.getvalue() == "ns=test state=success elapsed=2.500s num=42\n"


def test_start_does_not_write(log: Logger, buffer: io.StringIO) -> None:
    started = log.start()
    assert buffer.getvalue() == ""
    assert started.started_at is not None
    assert log.started_at is None


def test_started_at_survives_derivation(buffer: io.StringIO) -> None:
    ticks = count(start=1)
    log = Logger("ns=test", buffer, clock=lambda: float(next(ticks)))
    log.start().at("later").success("done")
    assert buffer.getvalue() == "ns=test at=later state=success elapsed=1.000s done\n"


def test_log_does_not_render_elapsed(buffer: io.StringIO) -> None:
    log = Logger("ns=test", buffer, clock=_fake_clock(1.0))
    log.start().log("plain")
    assert buffer.getvalue() == "ns=test plain\n"


def test_sibling_derivations_do_not_leak(log: Logger, buffer: io.StringIO) -> None:
    parent = log.with_namespace("base=1")
    left = parent.at("x")
    right = parent.at("y")
    parent.log("p")
    left.log("l")
    right.log("r")
    assert buffer.getvalue().splitlines() == [
        "ns=test base=1 p",
        "ns=test base=1 at=x l",
        "ns=test base=1 at=y r",
    ]


def test_emission_never_touches_attributes(log: Logger) -> None:
    derived = log.with_namespace("a=1")
    before = derived.attributes
    derived.log("one")
    derived.success("two")
    derived.error(RuntimeError("three"))
    assert derived.attributes == before == ("a=1",)


def test_attributes_become_a_tuple(buffer: io.StringIO) -> None:
    source = ["a=1"]
    log = Logger("ns=test", buffer, attributes=source)
    source.append("b=2")
    assert log.attributes == ("a=1",)


def test_logger_is_frozen(log: Logger) -> None:
    with pytest.raises(AttributeError):
        log.namespace = "other"  # type: ignore[misc]


def test_render_skips_empty_parts(buffer: io.StringIO) -> None:
    assert Logger("", buffer).render("msg") == "msg\n"
    assert Logger("ns=test", buffer).render("") == "ns=test\n"


def test_each_emission_is_one_write() -> None:
    class CountingSink:
        def __init__(self) -> None:
            self.calls: list[str] = []

        def write(self, text: str) -> int:
            self.calls.append(text)
            return len(text)

    sink = CountingSink()
    log = new_writer("ns=test", sink).with_namespace("a=1").at("b")
    log.log("x=%d", 1)
    log.success("y")
    log.error(RuntimeError("z"))
    assert sink.calls == [
        "ns=test a=1 at=b x=1\n",
        "ns=test a=1 at=b state=success y\n",
        'ns=test a=1 at=b state=error error="z"\n',
    ]


SLOT_VALUES = st.text(alphabet=st.characters(categories=("Ll", "Lu", "Nd")), min_size=1, max_size=8)


@given(st.lists(SLOT_VALUES, min_size=1, max_size=6))
def test_at_keeps_only_innermost_value(targets: list[str]) -> None:
    buffer = io.StringIO()
    log = new_writer("ns=test", buffer)
    for target in targets:
        log = log.at(target)
    log.log("end")
    tokens = buffer.getvalue().split()
    assert [token for token in tokens if token.startswith("at=")] == [f"at={targets[-1]}"]


@given(st.lists(SLOT_VALUES, min_size=1, max_size=6))
def test_step_keeps_only_innermost_value(targets: list[str]) -> None:
    log = new_writer("ns=test", io.StringIO())
    for target in targets:
        log = log.step(target)
    assert log.attributes == (f"step={targets[-1]}",)


@given(st.lists(st.tuples(SLOT_VALUES, SLOT_VALUES), max_size=6))
def test_with_namespace_preserves_order(pairs: list[tuple[str, str]]) -> None:
    log = new_writer("ns=test", io.StringIO())
    for key, value in pairs:
        log = log.with_namespace(f"{key}={value}")
    assert log.attributes == tuple(f"{key}={value}" for key, value in pairs)


@given(st.lists(SLOT_VALUES, max_size=5), SLOT_VALUES)
def test_derivation_leaves_parent_untouched(values: list[str], extra: str) -> None:
    parent = new_writer("ns=test", io.StringIO()).with_namespace(" ".join(f"k{i}={v}" for i, v in enumerate(values)))
    snapshot = parent.attributes
    parent.at(extra)
    parent.step(extra)
    parent.replace("k0", extra)
    parent.append(extra)
    parent.with_namespace(f"x={extra}")
    parent.start()
    assert parent.attributes == snapshot
    assert parent.started_at is None
