from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import pytest

import errs
from errs import Error, ErrsConfig, using_config
from errs.encode import document, format_error, verbose


ERR_TEST = errs.new('"Error" for test')
MODULE_CALLER = f"{__name__}.<module>"


class WrappingError(Exception):
    def __init__(self, msg: str, err: BaseException) -> None:
        super().__init__(msg)
        self.msg = msg
        self.err = err

    def __str__(self) -> str:
        return f"{self.msg}: {self.err}"

    def unwrap(self) -> BaseException:
        return self.err


class SelfEncoding(Exception):
    def __json__(self) -> Any:
        return {"Type": "custom", "Code": 7}


def test_type_name() -> None:
    assert errs.type_name(ValueError("x")) == "ValueError"
    assert errs.type_name(ValueError) == "ValueError"
    assert errs.type_name(ERR_TEST) == "errs.error.Error"
    assert errs.type_name(WrappingError("a", ValueError())) == f"{__name__}.WrappingError"


def test_verbose_uses_nil_token_for_absent_values() -> None:
    assert verbose(None) == "<nil>"
    assert verbose(Error.nil()) == "<nil>"
    assert verbose(ValueError("x")) == "ValueError('x')"


def test_encode_json_spec_example() -> None:
    err = errs.new("msg", errs.with_context("k", "v"), errs.with_caller(None))

    assert errs.encode_json(err) == (
        '{"Type":"errs.error.Error","Err":{"Type":"Exception","Msg":"msg"},"Context":{"k":"v"}}'
    )


def test_encode_json_with_cause_and_context() -> None:
    err = errs.new(
        "wrapped message",
        errs.with_cause(ERR_TEST),
        errs.with_context("num", 1),
        errs.with_context("foo", "bar"),
    )
    caller = f"{__name__}.test_encode_json_with_cause_and_context"
    module_caller = MODULE_CALLER.replace("<", "\\u003c").replace(">", "\\u003e")

    assert errs.encode_json(err) == (
        '{"Type":"errs.error.Error","Err":{"Type":"Exception","Msg":"wrapped message"},'
        f'"Context":{{"foo":"bar","function":"{caller}","num":1}},'
        '"Cause":{"Type":"errs.error.Error","Err":{"Type":"Exception","Msg":"\\"Error\\" for test"},'
        f'"Context":{{"function":"{module_caller}"}}}}}}'
    )
    assert f"{err:+v}" == errs.encode_json(err)
    assert err.to_json() == errs.encode_json(err)


def test_encode_json_foreign_wrapper_recurses_into_unwrap() -> None:
    foreign = WrappingError("test for WrappingError", errs.wrap(ERR_TEST, errs.with_caller(None)))
    err = errs.new("wrapped message", errs.with_cause(foreign), errs.with_caller(None))

    doc = json.loads(errs.encode_json(err))

    assert doc["Cause"] == {
        "Type": f"{__name__}.WrappingError",
        "Msg": 'test for WrappingError: "Error" for test',
        "Err": {
            "Type": "errs.error.Error",
            "Err": {
                "Type": "errs.error.Error",
                "Err": {"Type": "Exception", "Msg": '"Error" for test'},
                "Context": {"function": MODULE_CALLER},
            },
        },
    }


def test_document_of_chained_builtin_exception() -> None:
    outer = RuntimeError("outer")
    outer.__cause__ = ValueError("inner")

    assert document(outer) == {
        "Type": "RuntimeError",
        "Msg": "outer",
        "Err": {"Type": "ValueError", "Msg": "inner"},
    }


def test_document_uses_foreign_json_hook() -> None:
    err = errs.wrap(SelfEncoding(), errs.with_caller(None))
    assert document(err) == {"Type": "errs.error.Error", "Err": {"Type": "custom", "Code": 7}}


def test_encode_json_of_none_and_nil() -> None:
    assert errs.encode_json(None) == "null"
    assert errs.encode_json(Error.nil()) == "null"


def test_encode_json_omits_absent_parts() -> None:
    assert errs.encode_json(errs.wrap(None, errs.with_caller(None))) == '{"Type":"errs.error.Error"}'
    assert errs.encode_json(errs.wrap(Error.nil(), errs.with_caller(None))) == '{"Type":"errs.error.Error"}'


def test_encode_json_escapes_html_by_default() -> None:
    err = errs.new("<a & b>", errs.with_context("tag", "<b>"), errs.with_caller(None))

    out = errs.encode_json(err)

    assert "<" not in out and ">" not in out and "&" not in out
    assert '"Msg":"\\u003ca \\u0026 b\\u003e"' in out
    assert '"tag":"\\u003cb\\u003e"' in out
    assert json.loads(out)["Err"]["Msg"] == "<a & b>"


def test_encode_json_escapes_line_separators() -> None:
    err = errs.new("a\u2028b\u2029c", errs.with_caller(None))
    assert '"Msg":"a\\u2028b\\u2029c"' in errs.encode_json(err)


def test_encode_json_html_escaping_can_be_disabled() -> None:
    err = errs.new("<a & b>", errs.with_caller(None))
    with using_config(ErrsConfig(escape_html=False)):
        out = errs.encode_json(err)
    assert '"Msg":"<a & b>"' in out


def test_encode_json_keeps_non_ascii_text() -> None:
    err = errs.new("héllo", errs.with_caller(None))
    assert '"Msg":"héllo"' in errs.encode_json(err)


def test_encode_json_replaces_lone_surrogates() -> None:
    err = errs.new("a\ud800b", errs.with_caller(None), errs.with_context("k", "\udfff"))
    out = errs.encode_json(err)

    assert '"Msg":"a\ufffdb"' in out
    assert '"k":"\ufffd"' in out
    out.encode("utf-8")


def test_encode_json_converts_context_values() -> None:
    class Opaque:
        def __repr__(self) -> str:
            return "Opaque()"

    err = errs.new(
        "boom",
        errs.with_context("n", np.int64(3)),
        errs.with_context("x", np.float32(0.5)),
        errs.with_context("arr", np.arange(3)),
        errs.with_context("path", Path("data") / "a.wav"),
        errs.with_context("tags", {"b", "a"}),
        errs.with_context("obj", Opaque()),
        errs.with_caller(None),
    )

    ctx = json.loads(errs.encode_json(err))["Context"]

    assert ctx == {
        "arr": [0, 1, 2],
        "n": 3,
        "obj": "Opaque()",
        "path": str(Path("data") / "a.wav"),
        "tags": ["a", "b"],
        "x": 0.5,
    }
    assert list(ctx) == sorted(ctx)


def test_json_default_embeds_errors_in_payloads() -> None:
    err = errs.new("boom", errs.with_caller(None))

    payload = json.dumps({"error": err, "score": np.float64(1.5)}, default=errs.json_default)

    assert json.loads(payload) == {
        "error": {"Type": "errs.error.Error", "Err": {"Type": "Exception", "Msg": "boom"}},
        "score": 1.5,
    }


def test_json_default_rejects_unknown_objects() -> None:
    with pytest.raises(TypeError, match="not JSON serializable"):
        json.dumps({"x": object()}, default=errs.json_default)


def test_format_error_works_on_foreign_errors() -> None:
    exc = ValueError("bad")

    assert format_error(exc, "v") == "bad"
    assert format_error(exc, "#v") == "ValueError('bad')"
    assert format_error(exc, "+v") == '{"Type":"ValueError","Msg":"bad"}'
    assert format_error(exc, "T") == "ValueError"
    assert format_error(exc, "d") == "%!d(ValueError('bad'))"
