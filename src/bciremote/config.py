"""Remote profile handling for bciremote.

Profiles are stored in INI files, one section per profile:

[local]
# Connection
host = 127.0.0.1
port = 3999
timeout = 5

# Identity fields (optional)
subject_id = S01
session_id = 001
run_id =
data_directory = ../data

# Lifecycle flags (optional, default true)
stop_on_close = true
disconnect_on_close = true

# Modules, in startup order. Comma separated arguments, empty for none.
module.SignalGenerator = LogKeyboard=1, FileFormat=Null
module.DummySignalProcessing =
module.DummyApplication =

# Commands run right after connecting, in index order
init_command.0 = hide window

User profiles (~/.bciremote/remotes.ini) take precedence over the profiles
shipped with the package.

See Also
--------
bciremote.types.config : RemoteConfig dataclass
bciremote.remote.BCI2000Remote.from_config : Client construction from a profile
"""

from __future__ import annotations

from configparser import ConfigParser
from pathlib import Path
from typing import Optional

from loguru import logger

from bciremote.types import RemoteConfig

MODULE_PREFIX = "module."
INIT_COMMAND_PREFIX = "init_command."
BOOL_KEYS = ("stop_on_close", "disconnect_on_close")
STR_KEYS = ("host", "subject_id", "session_id", "run_id", "data_directory")


def user_remotes_file() -> Path:
    return Path.home() / ".bciremote" / "remotes.ini"


def package_remotes_file() -> Path:
    return Path(__file__).parent / "remotes.ini"


def _new_parser() -> ConfigParser:
    config = ConfigParser()
    config.optionxform = str  # module names are case sensitive
    return config


def validate_remote_config(config: ConfigParser, section: str) -> tuple[bool, str]:
    """Validate a remote profile section.

    Parameters
    ----------
    config : ConfigParser
        ConfigParser instance containing the profile
    section : str
        Name of the section to validate

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    if section not in config:
        return False, f"No such section: {section}"
    values = config[section]

    if "host" not in values or not values["host"].strip():
        return False, "Missing required field: host"

    try:
        port = values.getint("port", fallback=None)
    except ValueError:
        return False, f"Invalid port: {values['port']}"
    if port is not None and not 0 < port < 65536:
        return False, f"Port out of range: {port}"

    try:
        timeout = values.getfloat("timeout", fallback=None)
    except ValueError:
        return False, f"Invalid timeout: {values['timeout']}"
    if timeout is not None and timeout <= 0:
        return False, f"Timeout must be positive: {timeout}"

    for key in BOOL_KEYS:
        try:
            values.getboolean(key, fallback=None)
        except ValueError:
            return False, f"Invalid boolean for {key}: {values[key]}"

    for key in values:
        if key.startswith(MODULE_PREFIX) and not key[len(MODULE_PREFIX) :].strip():
            return False, "Empty module name"
        if key.startswith(INIT_COMMAND_PREFIX):
            index = key[len(INIT_COMMAND_PREFIX) :]
            if not index.isdigit():
                return False, f"Invalid init command index: {index}"

    return True, ""


def _parse_module_args(raw: str) -> Optional[list[str]]:
    args = [arg.strip() for arg in raw.split(",") if arg.strip()]
    return args or None


def _create_remote_config(config: ConfigParser, section: str) -> RemoteConfig:
    is_valid, error_msg = validate_remote_config(config, section)
    if not is_valid:
        raise ValueError(f"Invalid remote profile '{section}': {error_msg}")

    values = config[section]
    kwargs: dict = {"name": section}
    for key in STR_KEYS:
        if key in values:
            kwargs[key] = values[key].strip()
    if "port" in values:
        kwargs["port"] = values.getint("port")
    if "timeout" in values:
        kwargs["timeout"] = values.getfloat("timeout")
    for key in BOOL_KEYS:
        if key in values:
            kwargs[key] = values.getboolean(key)

    modules = {}
    init_commands = []
    for key, value in values.items():
        if key.startswith(MODULE_PREFIX):
            modules[key[len(MODULE_PREFIX) :].strip()] = _parse_module_args(value)
        elif key.startswith(INIT_COMMAND_PREFIX):
            init_commands.append((int(key[len(INIT_COMMAND_PREFIX) :]), value))
    kwargs["modules"] = modules
    kwargs["init_commands"] = [command for _, command in sorted(init_commands)]

    return RemoteConfig(**kwargs)


def load_remote_config(name: str) -> RemoteConfig:
    """Load a remote profile by (case-insensitive) name.

    Raises
    ------
    ValueError
        If no profile of that name exists, or it fails validation.
    """
    user_file = user_remotes_file()
    package_file = package_remotes_file()
    for source in (user_file, package_file):
        if not source.exists():
            continue
        config = _new_parser()
        config.read(source)
        for section in config.sections():
            if section.lower() == name.lower():
                logger.debug(f"Loading remote profile '{section}' from {source}")
                return _create_remote_config(config, section)

    raise ValueError(
        f"Remote '{name}' not found in:\n"
        f"- User config: {user_file}\n"
        f"- Package config: {package_file}"
    )


def list_available_remotes() -> dict[str, str]:
    """List all available remote profiles.

    Returns
    -------
    dict[str, str]
        Profile name -> source ('user' or 'package'). User profiles shadow
        package ones of the same name.
    """
    remotes = {}
    for source, label in (
        (package_remotes_file(), "package"),
        (user_remotes_file(), "user"),
    ):
        if source.exists():
            config = _new_parser()
            config.read(source)
            for section in config.sections():
                remotes[section] = label
    return remotes


def create_default_remotes_file(file_path: Optional[Path] = None) -> Path:
    """Write the user remotes file with an example profile.

    Sections already present in the file are preserved.
    """
    if file_path is None:
        file_path = user_remotes_file()
    file_path.parent.mkdir(parents=True, exist_ok=True)

    config = _new_parser()
    config["local"] = {
        "host": "127.0.0.1",
        "port": "3999",
        "timeout": "5",
        "stop_on_close": "true",
        "disconnect_on_close": "true",
        "module.SignalGenerator": "LogKeyboard=1",
        "module.DummySignalProcessing": "",
        "module.DummyApplication": "",
    }

    if file_path.exists():
        existing = _new_parser()
        existing.read(file_path)
        for section in existing.sections():
            logger.debug(f"Preserving existing section: {section}")
            config[section] = dict(existing[section])

    logger.debug(f"Writing remotes file at {file_path}")
    with file_path.open("w") as f:
        config.write(f)
    return file_path


def copy_remote_config(source: str, dest: str) -> None:
    """Duplicate a user profile under a new name.

    Raises
    ------
    FileNotFoundError
        If the user remotes file doesn't exist
    ValueError
        If source doesn't exist or dest already does
    """
    config_file = user_remotes_file()
    if not config_file.exists():
        raise FileNotFoundError("No remotes configuration file found")

    config = _new_parser()
    config.read(config_file)

    if source not in config.sections():
        raise ValueError(f"Source remote '{source}' not found")
    if dest in config.sections():
        raise ValueError(f"Destination remote '{dest}' already exists")

    config[dest] = dict(config[source])

    with config_file.open("w") as f:
        config.write(f)
