"""In-memory emulation of the operator, for testing without BCI2000.

Implements the `Connection` protocol. Successful commands answer with the
prompt (preceded by a value line for queries); errors answer with bare
diagnostic text, so the simple-command heuristic sees them as failures.

State machine::

    Idle --startup system--> Startup --start executable--> Connected
    Connected/Resting/Suspended --set config--> Resting
    Resting/Suspended --start system--> Running --stop system--> Suspended
    any --shutdown system--> Idle
"""

from __future__ import annotations

import re
import shlex
from typing import Optional, Union

from loguru import logger

from bciremote.types import CommsError, SystemState
from bciremote.util.defaults import LINE_ENDING, PROMPT

Reply = tuple[str, int]

_PARAM_DEF = re.compile(r"(\S+)=\s*(\S*)")

DEFAULT_PARAMETERS = {
    "SubjectName": "",
    "SubjectSession": "",
    "SubjectRun": "00",
    "DataDirectory": "../data",
}


def _ok(value: Optional[str] = None) -> Reply:
    if value is None:
        return PROMPT, 1
    return value + LINE_ENDING + PROMPT, 1


def _error(message: str) -> Reply:
    return message, 0


class MockOperator:
    """Scriptable stand-in for an operator session.

    Parameters
    ----------
    failing_modules : dict[str, int], optional
        Module name -> status code returned by `start executable` for it.
    scripted : dict[str, str | tuple[str, int]], optional
        Exact command -> canned answer, taking precedence over the emulation.
        A bare string answer gets status code 0.

    Attributes
    ----------
    commands : list[str]
        Every command received, in order.
    state : str
        Current system state label.
    parameters, states : dict
        Parameter and state variable stores.
    modules : list[str]
        Modules started since the last `shutdown system`.
    """

    def __init__(
        self,
        failing_modules: Optional[dict[str, int]] = None,
        scripted: Optional[dict[str, Union[str, Reply]]] = None,
    ):
        self.failing_modules = dict(failing_modules or {})
        self.scripted = dict(scripted or {})
        self.commands: list[str] = []
        self.state = SystemState.IDLE
        self.parameters: dict[str, str] = dict(DEFAULT_PARAMETERS)
        self.states: dict[str, float] = {}
        self.modules: list[str] = []
        self._connected = False

    def connect(self) -> bool:
        self._connected = True
        return True

    def disconnect(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def execute(self, command: str) -> Reply:
        if not self._connected:
            raise CommsError("MockOperator not connected")
        self.commands.append(command)
        if command in self.scripted:
            reply = self.scripted[command]
            return (reply, 0) if isinstance(reply, str) else reply
        reply = self._dispatch(command)
        logger.trace("MockOperator {!r} -> {!r}", command, reply)
        return reply

    # ------------------------------------------------------------------

    def _dispatch(self, command: str) -> Reply:
        for prefix, handler in (
            ("shutdown system", self._shutdown),
            ("startup system", self._startup),
            ("start executable ", self._start_executable),
            ("set config", self._set_config),
            ("start system", self._start_system),
            ("stop system", self._stop_system),
            ("get system state", self._get_system_state),
            ("wait for ", self._wait_for),
            ("is parameter ", self._is_parameter),
            ("get parameter ", self._get_parameter),
            ("set parameter ", self._set_parameter),
            ("add parameter ", self._add_parameter),
            ("load parameters ", self._load_parameters),
            ("add state ", self._add_state),
            ("set state ", self._set_state),
            ("get state ", self._get_state),
            ("capture messages", self._no_op),
            ("flush messages", self._no_op),
        ):
            if command.startswith(prefix):
                return handler(command[len(prefix) :].strip())
        return _error(f"Unknown command: {command}")

    def _no_op(self, args: str) -> Reply:
        return _ok()

    def _shutdown(self, args: str) -> Reply:
        self.state = SystemState.IDLE
        self.modules = []
        return _ok()

    def _startup(self, args: str) -> Reply:
        if self.state != SystemState.IDLE:
            return _error("System is not idle")
        self.state = SystemState.STARTUP
        return _ok()

    def _start_executable(self, args: str) -> Reply:
        module = args.split()[0] if args else ""
        if module in self.failing_modules:
            return f"Could not start {module}", self.failing_modules[module]
        if self.state == SystemState.IDLE:
            return _error("System is not started up")
        self.modules.append(module)
        self.state = SystemState.CONNECTED
        return _ok()

    def _set_config(self, args: str) -> Reply:
        if self.state not in (
            SystemState.CONNECTED,
            SystemState.RESTING,
            SystemState.SUSPENDED,
        ):
            return _error(f"Cannot set config in state {self.state}")
        self.state = SystemState.RESTING
        return _ok()

    def _start_system(self, args: str) -> Reply:
        if self.state not in (SystemState.RESTING, SystemState.SUSPENDED):
            return _error(f"Cannot start system in state {self.state}")
        self.state = SystemState.RUNNING
        return _ok()

    def _stop_system(self, args: str) -> Reply:
        if self.state != SystemState.RUNNING:
            return _error("System is not running")
        self.state = SystemState.SUSPENDED
        return _ok()

    def _get_system_state(self, args: str) -> Reply:
        return _ok(self.state)

    def _wait_for(self, args: str) -> Reply:
        # nothing advances in the background, so waiting can only succeed now
        if self.state in args.split("|"):
            return _ok()
        return _error(f"Timeout waiting for {args}, state is {self.state}")

    def _is_parameter(self, args: str) -> Reply:
        name = _unquote(args)
        if name in self.parameters:
            return "true" + LINE_ENDING + PROMPT, 1
        return "false" + LINE_ENDING + PROMPT, 0

    def _get_parameter(self, args: str) -> Reply:
        name = _unquote(args)
        if name not in self.parameters:
            return _error(f"Parameter {name} does not exist")
        return _ok(self.parameters[name])

    def _set_parameter(self, args: str) -> Reply:
        words = _split(args)
        if len(words) == 2:
            name, value = words
        else:
            definition = _PARAM_DEF.search(args)
            if definition is None:
                return _error(f"Cannot parse parameter assignment: {args}")
            name, value = definition.groups()
        if name not in self.parameters:
            return _error(f"Parameter {name} does not exist")
        self.parameters[name] = value
        return _ok()

    def _add_parameter(self, args: str) -> Reply:
        definition = _PARAM_DEF.search(args)
        if definition is None:
            return _error(f"Cannot parse parameter definition: {args}")
        name, value = definition.groups()
        self.parameters[name] = value
        return _ok()

    def _load_parameters(self, args: str) -> Reply:
        return _ok()

    def _add_state(self, args: str) -> Reply:
        words = _split(args)
        if len(words) != 3:
            return _error(f"Cannot parse state definition: {args}")
        name, _, value = words
        try:
            self.states[name] = float(value)
        except ValueError:
            return _error(f"Invalid initial value: {value}")
        return _ok()

    def _set_state(self, args: str) -> Reply:
        words = _split(args)
        if len(words) != 2 or words[0] not in self.states:
            return _error(f"No such state: {args}")
        try:
            self.states[words[0]] = float(words[1])
        except ValueError:
            return _error(f"Invalid state value: {words[1]}")
        return _ok()

    def _get_state(self, args: str) -> Reply:
        name = _unquote(args)
        if name not in self.states:
            return _error(f"No such state: {name}")
        value = self.states[name]
        return _ok(f"{value:g}")


def _unquote(text: str) -> str:
    words = _split(text)
    return words[0] if words else ""


def _split(text: str) -> list[str]:
    try:
        return shlex.split(text)
    except ValueError:
        return text.split()
