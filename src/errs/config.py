from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional
import logging
import os

import yaml

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when errs configuration is missing or invalid."""


_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


def _parse_bool(raw: str) -> Optional[bool]:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


def _parse_level(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else None


@dataclass(frozen=True)
class ErrsConfig:
    """
    Library-wide settings for error construction and rendering.

    Parameters
    ----------
    capture_caller
        If True, ``new``/``wrap`` record the calling function in the error context.
    caller_key
        Context key the caller is stored under.
    escape_html
        If True, JSON output escapes ``<``, ``>`` and ``&`` the way HTML-safe encoders do.
    log_level
        Level for the ``errs`` logger when :func:`errs.configure_logging` is used.
    log_file
        Optional plain-text log file for the ``errs`` logger.
    env_prefix
        Prefix for environment-variable overrides.

    Usage example
    -------------
        cfg = ErrsConfig(capture_caller=False)
        set_config(cfg)
    """

    capture_caller: bool = True
    caller_key: str = "function"
    escape_html: bool = True

    log_level: int = 30  # logging.WARNING
    log_file: Optional[Path] = None

    env_prefix: str = field(default="ERRS_", repr=False)

    @classmethod
    def from_env(cls, *, default: Optional["ErrsConfig"] = None) -> "ErrsConfig":
        """
        Create config from environment variables.

        Supported variables (prefix controlled by env_prefix on `default`):
        - <PFX>CAPTURE_CALLER: "1"/"0"
        - <PFX>CALLER_KEY: string
        - <PFX>ESCAPE_HTML: "1"/"0"
        - <PFX>LOG_LEVEL: level name or integer
        - <PFX>LOG_FILE: path

        Invalid values are logged and fall back to `default`.

        Usage example
        -------------
            cfg = ErrsConfig.from_env(default=ErrsConfig(env_prefix="MYAPP_"))
        """
        base = default if default is not None else cls()
        pfx = base.env_prefix

        capture_caller = base.capture_caller
        raw = os.getenv(f"{pfx}CAPTURE_CALLER")
        if raw is not None:
            parsed = _parse_bool(raw)
            if parsed is None:
                logger.warning("Ignoring invalid %sCAPTURE_CALLER=%r", pfx, raw)
            else:
                capture_caller = parsed

        escape_html = base.escape_html
        raw = os.getenv(f"{pfx}ESCAPE_HTML")
        if raw is not None:
            parsed = _parse_bool(raw)
            if parsed is None:
                logger.warning("Ignoring invalid %sESCAPE_HTML=%r", pfx, raw)
            else:
                escape_html = parsed

        caller_key = os.getenv(f"{pfx}CALLER_KEY", "").strip() or base.caller_key

        log_level = base.log_level
        raw = os.getenv(f"{pfx}LOG_LEVEL", "")
        if raw.strip():
            level = _parse_level(raw)
            if level is None:
                logger.warning("Ignoring invalid %sLOG_LEVEL=%r", pfx, raw)
            else:
                log_level = level

        raw = os.getenv(f"{pfx}LOG_FILE", "").strip()
        log_file = Path(raw) if raw else base.log_file

        return cls(
            capture_caller=capture_caller,
            caller_key=caller_key,
            escape_html=escape_html,
            log_level=log_level,
            log_file=log_file,
            env_prefix=pfx,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, default: Optional["ErrsConfig"] = None) -> "ErrsConfig":
        """Create config from a parsed mapping, rejecting unknown keys and bad types."""
        base = default if default is not None else cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(key) for key in set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown errs config keys: {', '.join(unknown)}")

        updates: dict[str, Any] = {}
        for key, value in data.items():
            if key in ("capture_caller", "escape_html"):
                if not isinstance(value, bool):
                    raise ConfigError(f"{key} must be a boolean, got {value!r}")
                updates[key] = value
            elif key in ("caller_key", "env_prefix"):
                if not isinstance(value, str) or (key == "caller_key" and not value.strip()):
                    raise ConfigError(f"{key} must be a non-empty string, got {value!r}")
                updates[key] = value
            elif key == "log_level":
                level = _parse_level(value)
                if level is None:
                    raise ConfigError(f"log_level must be a level name or integer, got {value!r}")
                updates[key] = level
            elif key == "log_file":
                if value is not None and not isinstance(value, (str, os.PathLike)):
                    raise ConfigError(f"log_file must be a path, got {value!r}")
                updates[key] = Path(value) if value is not None else None
        return replace(base, **updates)


def load_config(path: Path) -> ErrsConfig:
    """
    Load errs config from a YAML file.

    The file may either hold the settings at top level or under an ``errs:`` section.
    An empty file yields the defaults.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    section = data.get("errs", data)
    if section is None:
        section = {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"'errs' section of {path} must be a mapping")

    cfg = ErrsConfig.from_mapping(section)
    logger.debug("Loaded errs config from %s", path)
    return cfg


_active = ErrsConfig()


def get_config() -> ErrsConfig:
    """Return the active configuration."""
    return _active


def set_config(cfg: ErrsConfig) -> ErrsConfig:
    """Install `cfg` as the active configuration and return the previous one."""
    global _active
    previous, _active = _active, cfg
    return previous


@contextmanager
def using_config(cfg: ErrsConfig) -> Iterator[ErrsConfig]:
    """
    Temporarily activate `cfg`.

    Usage example
    -------------
        with using_config(ErrsConfig(capture_caller=False)):
            err = errs.new("boom")
    """
    previous = set_config(cfg)
    try:
        yield cfg
    finally:
        set_config(previous)
