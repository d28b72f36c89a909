"""Rendering of errors: type names, verbose dumps, JSON documents and format specs."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any
import json
import logging
import re

import numpy as np

from .chain import unwrap
from .config import get_config
from .types import NIL_POINTER, NIL_TOKEN, JSONDocument, is_nil

logger = logging.getLogger(__name__)

_HTML_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)

_SURROGATES = re.compile("[\ud800-\udfff]")

_UNKNOWN = object()


def type_name(obj: Any) -> str:
    """Return ``module.QualName`` for the type of `obj` (builtins drop the module)."""
    cls = obj if isinstance(obj, type) else type(obj)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def verbose(value: Any) -> str:
    """Structural dump of `value`; absent and nil-typed values render as the nil token."""
    if value is None or is_nil(value):
        return NIL_TOKEN
    return repr(value)


def document(err: Any) -> Any:
    """
    Build the JSON document for `err`.

    Errors exposing ``__json__`` supply their own document. Any other exception
    renders as ``{"Type", "Msg"}`` plus ``"Err"`` when it wraps something.
    """
    if err is None or is_nil(err):
        return None
    if isinstance(err, JSONDocument):
        return err.__json__()

    doc: dict[str, Any] = {"Type": type_name(err), "Msg": str(err)}
    inner = unwrap(err)
    if inner is not None and not is_nil(inner):
        doc["Err"] = document(inner)
    return doc


def _to_jsonable(obj: Any) -> Any:
    if isinstance(obj, BaseException):
        return document(obj)
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, PurePath):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    return _UNKNOWN


def json_default(obj: Any) -> Any:
    """
    ``default=`` hook for :func:`json.dumps` that knows about errors and numpy values.

    Usage example
    -------------
        json.dumps({"error": err}, default=json_default)
    """
    value = _to_jsonable(obj)
    if value is _UNKNOWN:
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
    return value


def _lenient_default(obj: Any) -> Any:
    value = _to_jsonable(obj)
    return repr(obj) if value is _UNKNOWN else value


def encode_json(err: Any) -> str:
    """Render any error (or None) as compact JSON; context values never fail to encode."""
    text = json.dumps(
        document(err),
        ensure_ascii=False,
        separators=(",", ":"),
        default=_lenient_default,
    )
    text = _SURROGATES.sub("\ufffd", text)
    if get_config().escape_html:
        text = text.translate(_HTML_ESCAPES)
    return text


def format_error(err: Any, spec: str) -> str:
    """
    Render `err` according to a format spec.

    ``""``/``v``/``s`` give the message, ``#v`` the verbose dump, ``+v`` JSON,
    ``p`` the address and ``T`` the type name. Anything else yields a
    ``%!<spec>(...)`` marker instead of raising.
    """
    if spec in ("", "v", "s"):
        return str(err)
    if spec == "#v":
        return verbose(err)
    if spec == "+v":
        return encode_json(err)
    if spec == "p":
        return NIL_POINTER if is_nil(err) else hex(id(err))
    if spec == "T":
        return type_name(err)

    logger.debug("Unsupported format spec %r for %s", spec, type_name(err))
    return f"%!{spec}({verbose(err)})"
