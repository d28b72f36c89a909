from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, Protocol, TypeVar, runtime_checkable

E = TypeVar("E", bound=BaseException)

NIL_TOKEN = "<nil>"
NIL_POINTER = "0x0"


@runtime_checkable
class Unwrapper(Protocol):
    """An error exposing one step into its wrap chain."""

    def unwrap(self) -> Optional[BaseException]: ...


@runtime_checkable
class CauseCarrier(Protocol):
    """An error carrying a side-chain cause, separate from its wrap chain."""

    @property
    def cause(self) -> Optional[BaseException]: ...


@runtime_checkable
class JSONDocument(Protocol):
    """An error that renders its own JSON document (a JSON-compatible object)."""

    def __json__(self) -> Any: ...


@runtime_checkable
class Matcher(Protocol):
    """An error that decides for itself whether it matches a target."""

    def is_(self, target: BaseException) -> bool: ...


@runtime_checkable
class Caster(Protocol):
    """An error that can fill a :class:`Target` with something other than itself."""

    def as_(self, target: "Target[Any]") -> bool: ...


@dataclass
class Target(Generic[E]):
    """
    Receives the first error of a wanted type found by :func:`errs.as_`.

    Usage example
    -------------
        target = Target(OSError)
        if errs.as_(err, target):
            print(target.value.errno)
    """
    type: type[E]
    value: Optional[E] = None

    def accepts(self, err: BaseException) -> bool:
        """Return True if `err` is an instance of the wanted type."""
        return isinstance(err, self.type)


def is_nil(err: Any) -> bool:
    """Return True for nil-typed error values (not for ``None``)."""
    return getattr(err, "is_nil", False) is True
