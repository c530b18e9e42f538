"""imapquery configuration package.

What:
  Provide the import surface for configuration loading and the pydantic
  schema used by the client, the query layer, and the CLI.

How:
  Re-export the loader helpers and schema classes; ``__all__`` lists the
  supported API.
"""

from .loader import (
    ConfigLoadError,
    ConfigNotFoundError,
    RuntimeConfigError,
    get_query_options,
    get_runtime_config,
    load_runtime_config,
    reset_runtime_config,
)
from .schema import (
    FetchMode,
    FetchOrder,
    IdleSettings,
    ImapSettings,
    MessageKey,
    QueryOptions,
    RuntimeConfig,
)

__all__ = [
    "ConfigLoadError",
    "ConfigNotFoundError",
    "RuntimeConfigError",
    "get_query_options",
    "get_runtime_config",
    "load_runtime_config",
    "reset_runtime_config",
    "FetchMode",
    "FetchOrder",
    "IdleSettings",
    "ImapSettings",
    "MessageKey",
    "QueryOptions",
    "RuntimeConfig",
]
