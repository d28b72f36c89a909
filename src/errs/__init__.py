"""
errs: errors that carry a wrapped error, a side-chain cause and a context map.

Key primitives
--------------
- new() / wrap(): build an Error, recording the calling function in its context
- with_cause() / with_context() / with_caller(): construction options
- cause() / is_() / as_() / unwrap() / walk(): walk wrap chains and cause side-chains
- encode_json() / json_default(): JSON rendering for any exception
- ErrsConfig / load_config() / set_config(): library settings
- configure_logging(): console + file output for the library's diagnostics
"""

from .chain import as_, cause, is_, unwrap, walk
from .config import ConfigError, ErrsConfig, get_config, load_config, set_config, using_config
from .encode import encode_json, format_error, json_default, type_name
from .error import Error, ErrorOptions, Option, new, with_caller, with_cause, with_context, wrap
from .logging import configure_logging
from .types import Target
from .version import __version__

__all__ = [
    "Error",
    "ErrorOptions",
    "Option",
    "new",
    "wrap",
    "with_cause",
    "with_context",
    "with_caller",
    "cause",
    "is_",
    "as_",
    "unwrap",
    "walk",
    "Target",
    "encode_json",
    "format_error",
    "json_default",
    "type_name",
    "ErrsConfig",
    "ConfigError",
    "load_config",
    "get_config",
    "set_config",
    "using_config",
    "configure_logging",
    "__version__",
]
