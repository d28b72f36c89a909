"""
The error value: a wrapped error plus an optional cause and a read-only context.

Key primitives
--------------
- Error: immutable exception carrying ``err``, ``cause`` and ``context``
- new(): build an Error around a fresh message
- wrap(): build an Error around an existing exception (or None)
- with_cause() / with_context() / with_caller(): construction options
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional
import sys

from .config import get_config
from .encode import document, encode_json, format_error, type_name, verbose
from .types import NIL_TOKEN, is_nil


class Error(Exception):
    """
    An exception wrapping another error, with a side-chain cause and context.

    ``str()`` follows the wrap chain only; the cause shows up in ``repr()``,
    JSON output and the chain-walking helpers.

    Usage example
    -------------
        try:
            load(path)
        except OSError as exc:
            raise errs.wrap(exc, errs.with_context("path", str(path))) from exc
    """

    def __init__(
        self,
        err: Optional[BaseException] = None,
        *,
        cause: Optional[BaseException] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__()
        self._err = err
        self._cause = None if cause is None or is_nil(cause) else cause
        self._context: dict[str, Any] = dict(context or {})
        self._nil = False

    @classmethod
    def nil(cls) -> "Error":
        """Return a nil-typed Error: an Error instance that stands for "no error"."""
        inst = cls()
        inst._nil = True
        return inst

    @property
    def is_nil(self) -> bool:
        return self._nil

    @property
    def err(self) -> Optional[BaseException]:
        """The wrapped error."""
        return self._err

    @property
    def cause(self) -> Optional[BaseException]:
        """The side-chain cause, or None."""
        return self._cause

    @property
    def context(self) -> Mapping[str, Any]:
        """Read-only view of the context entries."""
        return MappingProxyType(self._context)

    def unwrap(self) -> Optional[BaseException]:
        """One step into the wrap chain. Never returns the cause."""
        return self._err

    def __bool__(self) -> bool:
        return not self._nil

    def __str__(self) -> str:
        if self._nil or self._err is None:
            return NIL_TOKEN
        return str(self._err)

    def __repr__(self) -> str:
        if self._nil:
            return NIL_TOKEN
        ctx = ", ".join(f"{key!r}: {value!r}" for key, value in sorted(self._context.items()))
        return (
            f"{type_name(self)}{{Err:{verbose(self._err)}, "
            f"Cause:{verbose(self._cause)}, Context:{{{ctx}}}}}"
        )

    def __format__(self, spec: str) -> str:
        return format_error(self, spec)

    def __json__(self) -> Optional[dict[str, Any]]:
        if self._nil:
            return None
        doc: dict[str, Any] = {"Type": type_name(self)}
        if self._err is not None and not is_nil(self._err):
            doc["Err"] = document(self._err)
        if self._context:
            doc["Context"] = {key: self._context[key] for key in sorted(self._context)}
        if self._cause is not None:
            doc["Cause"] = document(self._cause)
        return doc

    def to_json(self) -> str:
        """Compact JSON rendering, same as ``format(err, "+v")``."""
        return encode_json(self)


@dataclass
class ErrorOptions:
    """
    Builder collecting the cause and context for a new Error.

    Methods apply in call order and return the builder, so they chain. A repeated
    context key keeps the last value; a repeated cause keeps the last cause.
    """
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def with_cause(self, err: Optional[BaseException]) -> "ErrorOptions":
        if err is not None and not isinstance(err, BaseException):
            raise TypeError(f"cause must be an exception, got {type(err).__name__}")
        self.cause = err
        return self

    def with_context(self, key: str, value: Any) -> "ErrorOptions":
        if not isinstance(key, str):
            raise TypeError(f"context key must be a string, got {type(key).__name__}")
        self.context[key] = value
        return self

    def with_caller(self, name: Optional[str]) -> "ErrorOptions":
        key = get_config().caller_key
        if name is None:
            self.context.pop(key, None)
        else:
            self.context[key] = name
        return self


Option = Callable[[ErrorOptions], ErrorOptions]


def with_cause(err: Optional[BaseException]) -> Option:
    """Option setting the side-chain cause."""
    return lambda opts: opts.with_cause(err)


def with_context(key: str, value: Any) -> Option:
    """Option adding one context entry."""
    return lambda opts: opts.with_context(key, value)


def with_caller(name: Optional[str]) -> Option:
    """Option replacing the recorded caller; None drops it."""
    return lambda opts: opts.with_caller(name)


def _caller_name() -> str:
    # 0: here, 1: new()/wrap(), 2: their caller
    frame = sys._getframe(2)
    code = frame.f_code
    qualname = getattr(code, "co_qualname", code.co_name)
    return f"{frame.f_globals.get('__name__', '?')}.{qualname}"


def _build(err: Optional[BaseException], options: tuple[Option, ...], caller: str) -> Error:
    opts = ErrorOptions()
    if get_config().capture_caller:
        opts.with_caller(caller)
    for option in options:
        option(opts)
    return Error(err, cause=opts.cause, context=opts.context)


def new(message: str, *options: Option) -> Error:
    """
    Create an Error around a new message.

    Usage example
    -------------
        err = new("cannot open config", with_cause(exc), with_context("path", "a.yaml"))
    """
    return _build(Exception(message), options, _caller_name())


def wrap(err: Optional[BaseException], *options: Option) -> Error:
    """
    Create an Error around an existing exception.

    Wrapping None is allowed and gives an Error whose message is the nil token.
    """
    if err is not None and not isinstance(err, BaseException):
        raise TypeError(f"wrap() expects an exception or None, got {type(err).__name__}")
    return _build(err, options, _caller_name())
