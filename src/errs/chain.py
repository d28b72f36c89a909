"""
Chain walking over arbitrary exceptions.

An error has two directions to follow:
- its wrap chain, one step at a time via ``unwrap()`` (or ``__cause__`` for
  plain exceptions raised with ``raise ... from ...``);
- its cause side-chain, an exception stored on a ``cause`` attribute.

``unwrap`` only follows the first. ``cause``, ``is_``, ``as_`` and ``walk``
follow both.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from .types import CauseCarrier, Caster, Matcher, Target, Unwrapper, is_nil


def unwrap(err: Optional[BaseException]) -> Optional[BaseException]:
    """Return one step into the wrap chain of `err`, or None."""
    if err is None:
        return None
    if isinstance(err, Unwrapper):
        return err.unwrap()
    return err.__cause__


def _side_cause(err: BaseException) -> Optional[BaseException]:
    if not isinstance(err, CauseCarrier):
        return None
    value = err.cause
    if isinstance(value, BaseException) and not is_nil(value):
        return value
    return None


def cause(err: Optional[BaseException]) -> Optional[BaseException]:
    """
    Return the deepest cause reachable from `err`.

    The wrap chain is walked link by link. As soon as a link carries a cause,
    the walk continues from that cause and the rest of the link's own chain is
    dropped. If no link carries a cause, `err` itself is returned.

    Usage example
    -------------
        root = cause(errs.new("load failed", errs.with_cause(exc)))
    """
    if err is None:
        return None

    found = err
    node: Optional[BaseException] = err
    seen: set[int] = set()
    while node is not None and id(node) not in seen:
        seen.add(id(node))
        side = _side_cause(node)
        if side is not None:
            found = side
            node = side
        else:
            node = unwrap(node)
    return found


def walk(err: Optional[BaseException]) -> Iterator[BaseException]:
    """
    Yield every error reachable from `err`, each once.

    Order is pre-order: the node, then everything below its wrap step, then
    everything below its cause.
    """
    if err is None:
        return

    stack: list[BaseException] = [err]
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node

        side = _side_cause(node)
        if side is not None:
            stack.append(side)
        inner = unwrap(node)
        if inner is not None:
            stack.append(inner)


def is_(err: Optional[BaseException], target: Optional[BaseException]) -> bool:
    """
    Report whether `target` appears in the wrap chain or cause side-chain of `err`.

    A None target matches a None error and any error whose message is empty.
    """
    if target is None:
        return err is None or str(err) == ""
    if err is None:
        return False

    for node in walk(err):
        if node is target or node == target:
            return True
        if isinstance(node, Matcher) and node.is_(target):
            return True
    return False


def as_(err: Optional[BaseException], target: Target[Any]) -> bool:
    """
    Find the first error in `err`'s chains that is an instance of ``target.type``.

    On success the match is stored in ``target.value`` and True is returned.
    On failure `target` is left untouched.

    Usage example
    -------------
        target = Target(FileNotFoundError)
        if as_(err, target):
            missing = target.value.filename
    """
    if not isinstance(target, Target):
        raise TypeError(f"as_() target must be a Target, got {type(target).__name__}")
    if err is None:
        return False

    for node in walk(err):
        if is_nil(node):
            continue
        if target.accepts(node):
            target.value = node
            return True
        if isinstance(node, Caster) and node.as_(target):
            return True
    return False
