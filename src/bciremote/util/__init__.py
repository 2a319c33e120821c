# -*- coding: utf-8 -*-
"""
Utility functions and constants for bciremote.

- Connection and logging defaults
- Logging configuration and management

Examples
--------
Logging client traffic to stderr:
```python
from bciremote.util import start_client_log
start_client_log(log_to_file=False, log_to_stdout=True, log_level="DEBUG")
```

See Also
--------
bciremote.util.logging : Logging configuration
"""

from .defaults import (
    DEFAULT_HOST_ADDR,
    DEFAULT_LOGLEVEL,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    LINE_ENDING,
    PROMPT,
    TEST_LOGLEVEL,
)
from .logging import (
    clear_log,
    get_log_filename,
    log_default_path_client,
    shutdown_client_log,
    start_client_log,
)

__all__ = [
    "DEFAULT_HOST_ADDR",
    "DEFAULT_LOGLEVEL",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT",
    "LINE_ENDING",
    "PROMPT",
    "TEST_LOGLEVEL",
    "clear_log",
    "get_log_filename",
    "log_default_path_client",
    "shutdown_client_log",
    "start_client_log",
]
