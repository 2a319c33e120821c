"""Configuration types for remote profiles."""

from dataclasses import dataclass, field
from typing import Optional

from mashumaro import DataClassDictMixin

from bciremote.util.defaults import DEFAULT_HOST_ADDR, DEFAULT_PORT, DEFAULT_TIMEOUT


@dataclass(kw_only=True)
class RemoteConfig(DataClassDictMixin):
    """Everything needed to connect a client and bring the operator up.

    Attributes
    ----------
    name : str
        Profile name (the INI section it was loaded from)
    host, port : str, int
        Operator telnet address
    timeout : float
        Connection timeout in seconds
    subject_id, session_id, run_id, data_directory : str
        Identity fields, empty means unset
    stop_on_close, disconnect_on_close : bool
        Lifecycle flags for `BCI2000Remote.close`
    modules : dict[str, list[str] | None]
        Module specification for `BCI2000Remote.startup_modules`
    init_commands : list[str]
        Commands executed right after connecting
    """

    name: str = "default"
    host: str = DEFAULT_HOST_ADDR
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    subject_id: str = ""
    session_id: str = ""
    run_id: str = ""
    data_directory: str = ""
    stop_on_close: bool = True
    disconnect_on_close: bool = True
    modules: dict[str, Optional[list[str]]] = field(default_factory=dict)
    init_commands: list[str] = field(default_factory=list)
