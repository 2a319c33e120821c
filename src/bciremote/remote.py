"""
Remote control client for the BCI2000 operator.

`BCI2000Remote` turns high-level operations (start the system, set a
parameter, read a state variable...) into operator command lines, sends them
through a `Connection` and interprets the free-text answers.

Every public operation returns a success flag (getters return a
``(success, value)`` tuple) and never raises. Two strings carry the details:

- `response` : raw text of the last command's answer (operator-side errors)
- `result` : last diagnostic raised by the client itself

Both are overwritten by later calls, so read them right after a failure.

Examples
--------
```python
from bciremote import BCI2000Remote

with BCI2000Remote() as remote:
    remote.subject_id = "S01"
    remote.connect()
    remote.startup_modules(
        {
            "SignalGenerator": ["LogKeyboard=1"],
            "DummySignalProcessing": None,
            "DummyApplication": None,
        }
    )
    if not remote.start():
        print(remote.result)
```

See Also
--------
bciremote.protocol : Escaping and response heuristics
bciremote.connection : Connection implementations
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from loguru import logger

from bciremote.connection.tcp import TcpConnection
from bciremote.protocol import (
    escape_special_chars,
    format_number,
    is_bare_prompt,
    is_simple_success,
    quote,
    start_executable_command,
    strip_prompt,
    wait_for_command,
)
from bciremote.types import CommsError, Connection, RemoteConfig, SystemState
from bciremote.util.defaults import PROMPT

DEFAULT_STOP_ON_CLOSE = True
DEFAULT_DISCONNECT_ON_CLOSE = True

# operator parameter names mirrored from the identity fields
SUBJECT_PARAM = "SubjectName"
SESSION_PARAM = "SubjectSession"
RUN_PARAM = "SubjectRun"
DATA_DIR_PARAM = "DataDirectory"


class BCI2000Remote:
    """Protocol client for one operator session.

    Parameters
    ----------
    connection : Connection, optional
        Transport to the operator. Defaults to a `TcpConnection` on the
        default host and port.
    stop_on_close : bool, optional
        Stop a running system in `close`, by default True
    disconnect_on_close : bool, optional
        Disconnect the transport in `close`, by default True

    Attributes
    ----------
    response : str
        Raw answer to the last executed command
    result : str
        Last diagnostic raised by the client
    """

    def __init__(
        self,
        connection: Optional[Connection] = None,
        stop_on_close: bool = DEFAULT_STOP_ON_CLOSE,
        disconnect_on_close: bool = DEFAULT_DISCONNECT_ON_CLOSE,
    ):
        self._connection = connection if connection is not None else TcpConnection()
        self.stop_on_close = stop_on_close
        self.disconnect_on_close = disconnect_on_close
        self.response = ""
        self.result = ""
        self._subject_id = ""
        self._session_id = ""
        self._run_id = ""
        self._data_directory = ""
        self._closed = False

    @classmethod
    def from_config(
        cls, config: RemoteConfig, connection: Optional[Connection] = None
    ) -> BCI2000Remote:
        """Build a client from a remote profile.

        Identity fields are stored but not pushed, since the client is not
        connected yet; `connect` replays them.
        """
        if connection is None:
            connection = TcpConnection(config.host, config.port, config.timeout)
        remote = cls(
            connection,
            stop_on_close=config.stop_on_close,
            disconnect_on_close=config.disconnect_on_close,
        )
        remote.subject_id = config.subject_id
        remote.session_id = config.session_id
        remote.run_id = config.run_id
        remote.data_directory = config.data_directory
        return remote

    # ------------------------------------------------------------------
    # identity fields
    # ------------------------------------------------------------------

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def subject_id(self) -> str:
        return self._subject_id

    @subject_id.setter
    def subject_id(self, value: str) -> None:
        self._subject_id = value
        self._push_identity(SUBJECT_PARAM, value)

    @property
    def session_id(self) -> str:
        return self._session_id

    @session_id.setter
    def session_id(self, value: str) -> None:
        self._session_id = value
        self._push_identity(SESSION_PARAM, value)

    @property
    def run_id(self) -> str:
        return self._run_id

    @run_id.setter
    def run_id(self, value: str) -> None:
        self._run_id = value
        self._push_identity(RUN_PARAM, value)

    @property
    def data_directory(self) -> str:
        return self._data_directory

    @data_directory.setter
    def data_directory(self, value: str) -> None:
        self._data_directory = value
        self._push_identity(DATA_DIR_PARAM, value)

    def _push_identity(self, param: str, value: str) -> None:
        if value and self.is_connected():
            self.execute(f"set parameter {param} {quote(value)}")

    # ------------------------------------------------------------------
    # connection lifecycle
    # ------------------------------------------------------------------

    def is_connected(self) -> bool:
        return self._connection.is_connected()

    def connect(self, init_commands: Optional[Iterable[str]] = None) -> bool:
        """Connect to the operator and replay the identity fields.

        Parameters
        ----------
        init_commands : Iterable[str], optional
            Commands executed in order after connecting. They run regardless
            of the connect outcome or of each other's success.

        Returns
        -------
        bool
            Outcome of the connect itself.
        """
        success = self._connection.connect()
        if success:
            logger.info("Connected to operator.")
            # setters re-push the stored values, order matters to the operator
            self.subject_id = self._subject_id
            self.session_id = self._session_id
            self.run_id = self._run_id
            self.data_directory = self._data_directory
        else:
            self.result = "Could not connect to operator"
            logger.warning(self.result)
        for command in init_commands or ():
            self.execute(command)
        return success

    def disconnect(self) -> None:
        self._connection.disconnect()

    def close(self) -> None:
        """Release the session: stop the system and disconnect, per the flags.

        Only the first call has an effect. Transport failures are logged and
        swallowed.
        """
        if self._closed:
            return
        self._closed = True
        try:
            if self.stop_on_close and self.is_connected():
                self.stop()
        finally:
            if self.disconnect_on_close:
                try:
                    self._connection.disconnect()
                except CommsError as e:
                    logger.warning(f"Error while disconnecting: {e}")

    def __enter__(self) -> BCI2000Remote:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # ------------------------------------------------------------------
    # command execution
    # ------------------------------------------------------------------

    def execute(self, command: str) -> Optional[int]:
        """Send one command line.

        Stores the raw answer in `response` and returns the transport's status
        code, or None if the command could not be exchanged (the reason is then
        in `result`).
        """
        logger.debug("-> {}", command)
        try:
            self.response, code = self._connection.execute(command)
        except CommsError as e:
            self.response = ""
            self.result = f"Could not execute '{command}': {e}"
            logger.error(self.result)
            return None
        logger.trace("<- {!r} (code {})", self.response, code)
        return code

    def simple_command(self, command: str) -> bool:
        """Execute `command` and judge success from the response text."""
        if self.execute(command) is None:
            return False
        return is_simple_success(self.response)

    # ------------------------------------------------------------------
    # system control
    # ------------------------------------------------------------------

    def startup_modules(self, modules: Mapping[str, Optional[Sequence[str]]]) -> bool:
        """Restart the operator's system and launch the given modules.

        Parameters
        ----------
        modules : Mapping[str, Sequence[str] | None]
            Module executable name -> arguments. Arguments may omit the leading
            `--` and may contain whitespace (removed). `--local` is added unless
            present. None means no arguments besides `--local`.

        Returns
        -------
        bool
            False if any module did not report status 1; every module is still
            attempted. True once all modules started and the wait for
            `Connected` was issued.
        """
        self.execute("shutdown system")
        self.execute("startup system localhost")
        errors = []
        for module, args in modules.items():
            code = self.execute(start_executable_command(module, args))
            if code != 1:
                errors.append(f"{module} returned {code}")
                logger.warning(f"Module {module} failed to start (code {code})")
        if errors:
            self.result = "Could not start modules: \n" + "\n".join(errors)
            return False
        self.wait_for_system_state(SystemState.CONNECTED)
        return True

    def set_config(self) -> bool:
        """Push identity fields and apply the operator configuration.

        Always returns True. Problems reported by `set config` end up in
        `result`, together with the final system state.
        """
        # run id is left alone, the operator manages run numbering itself
        self.subject_id = self._subject_id
        self.session_id = self._session_id
        self.data_directory = self._data_directory
        self.execute("capture messages none warnings errors")
        config_response = ""
        if self.simple_command("set config"):
            self.wait_for_system_state(
                (SystemState.RESTING, SystemState.INITIALIZATION)
            )
        else:
            config_response = self.response
        self.execute("capture messages none")
        self.execute("get system state")
        self.execute("flush messages")
        if config_response.strip() and not is_bare_prompt(config_response):
            self.result = config_response + "\n" + self.response
            logger.warning(f"set config reported: {config_response!r}")
        return True

    def start(self) -> bool:
        self.execute("get system state")
        if SystemState.RUNNING in self.response:
            self.result = "System is already running"
            logger.warning(self.result)
            return False
        if (
            SystemState.RESTING not in self.response
            and SystemState.SUSPENDED not in self.response
        ):
            self.set_config()
        return self.simple_command("start system")

    def stop(self) -> bool:
        self.execute("get system state")
        if SystemState.RUNNING not in self.response:
            self.result = "System is not running"
            logger.warning(self.result)
            return False
        return self.simple_command("stop system")

    def wait_for_system_state(self, state: str | Sequence[str]) -> bool:
        """Block until the operator reports `state`.

        A sequence of states waits for the first of them. There is no client
        side timeout; the call returns when the connection's `execute` does.
        """
        return self.simple_command(wait_for_command(state))

    def get_system_state(self) -> tuple[bool, str]:
        success = self.simple_command("get system state")
        return success, self.response

    # ------------------------------------------------------------------
    # parameters & state variables
    # ------------------------------------------------------------------

    def set_parameter(self, name: str, value: str) -> bool:
        return self.simple_command(f"set parameter {quote(name)} {quote(value)}")

    def get_parameter(self, name: str) -> tuple[bool, str]:
        """Read a parameter value.

        Returns
        -------
        tuple[bool, str]
            (success, raw response). The name is checked with `is parameter`
            first; unknown names fail without sending `get parameter`.
        """
        code = self.execute(f"is parameter {quote(name)}")
        if code != 1:
            self.result = f"{name} is not a valid parameter name"
            logger.warning(self.result)
            return False, ""
        self.execute(f"get parameter {quote(name)}")
        return True, self.response

    def add_state_variable(
        self, name: str, bit_width: int, initial_value: float = 0
    ) -> bool:
        if bit_width < 0:
            self.result = f"Invalid bit width {bit_width} for state {name}"
            logger.warning(self.result)
            return False
        return self.simple_command(
            f"add state {quote(name)} {bit_width} {format_number(initial_value)}"
        )

    def set_state_variable(self, name: str, value: float) -> bool:
        return self.simple_command(f"set state {quote(name)} {format_number(value)}")

    def get_state_variable(self, name: str) -> tuple[bool, float]:
        """Read a state variable as a float.

        Returns
        -------
        tuple[bool, float]
            (success, value). Non-numeric answers, and answers without a
            prompt, are a failure with value 0.0.
        """
        if not self.simple_command(f"get state {quote(name)}"):
            return False, 0.0
        if PROMPT not in self.response:
            self.result = (
                f"Could not read value of state {name}: no prompt in {self.response!r}"
            )
            logger.warning(self.result)
            return False, 0.0
        try:
            return True, float(strip_prompt(self.response))
        except ValueError:
            self.result = f"Could not read value of state {name}: {self.response!r}"
            logger.warning(self.result)
            return False, 0.0

    # ------------------------------------------------------------------
    # parameter files
    # ------------------------------------------------------------------

    def load_parameters_local(self, path: str, reread: bool = False) -> bool:
        """Send the parameter definitions of a local file line by line.

        Every line is first sent as ``add parameter <line>``, then the same
        handle is read again for ``set parameter <line>``. As the handle is
        already exhausted, the second pass sends nothing unless `reread` rewinds
        it first.

        Returns False only when the file cannot be opened. Failed lines are
        counted into `result` instead.
        """
        try:
            file = open(path, "r", encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            self.result = f"Could not open file {path}, {e.strerror or e}"
            logger.warning(self.result)
            return False
        with file:
            errors = self._send_parameter_lines(file, "add parameter")
            if errors:
                self.result = f"Could not add {errors} parameter(s)"
                logger.warning(self.result)
            if reread:
                file.seek(0)
            errors = self._send_parameter_lines(file, "set parameter")
            if errors:
                self.result = f"Could not set {errors} parameter(s)"
                logger.warning(self.result)
        return True

    def _send_parameter_lines(self, lines: Iterable[str], verb: str) -> int:
        errors = 0
        for line in lines:
            line = line.rstrip("\r\n")
            if not self.simple_command(f"{verb} {escape_special_chars(line)}"):
                errors += 1
        return errors

    def load_parameters_remote(self, path: str) -> bool:
        """Have the operator load a parameter file from its own filesystem."""
        return self.simple_command(f"load parameters {quote(path)}")
