# -*- coding: utf-8 -*-
"""# bciremote

Remote control client for the BCI2000 operator.

The operator listens for line-based text commands (`set parameter ...`,
`start system`, `wait for Resting` ...) and answers with free text followed by
a `>` prompt. This package provides:

- `BCI2000Remote`: the protocol client (identity fields, module startup,
  configuration, start/stop, parameters, state variables, parameter files)
- `TcpConnection`: a TCP session to a running operator
- `MockOperator`: an in-memory operator for tests and dry runs
- INI remote profiles (`bciremote.config`) and loguru log setup
  (`bciremote.util`)

Example
-------
```python
from bciremote import BCI2000Remote, load_remote_config

cfg = load_remote_config("local")
with BCI2000Remote.from_config(cfg) as remote:
    remote.connect(cfg.init_commands)
    remote.startup_modules(cfg.modules)
    remote.start()
```
"""

from ._version import __version__
from .config import list_available_remotes, load_remote_config
from .connection import MockOperator, TcpConnection
from .remote import BCI2000Remote
from .types import CommsError, Connection, RemoteConfig, SystemState

__all__ = [
    "__version__",
    "BCI2000Remote",
    "CommsError",
    "Connection",
    "MockOperator",
    "RemoteConfig",
    "SystemState",
    "TcpConnection",
    "list_available_remotes",
    "load_remote_config",
]
