# pydoit task file
# see https://pydoit.org/
# run from this dir with `doit`, or `doit list` (pip install doit 1st)

from doit.action import CmdAction


def _pytest_command(keyword="", speed="", print_logs=False):
    cmd = ["pytest", "--color=yes", "-vv"]
    if print_logs:
        cmd.append("--capture=no")
    if keyword:
        cmd.extend(["-k", f'"{keyword}"'])
    if speed == "slow":
        cmd.extend(["-m", "slow"])
    elif speed == "fast":
        cmd.extend(["-m", '"not slow"'])
    cmd.append("test/logic/")
    return " ".join(cmd)


def task_install():
    """Install bciremote in editable mode, with test extras"""
    return {
        "actions": ["pip install -e .[test]"],
        "verbosity": 2,
    }


def task_test():
    """Run the logic test suite. Options: -k KEYWORD, -s slow|fast, -p (print logs)"""
    return {
        "actions": [CmdAction(_pytest_command)],
        "params": [
            {"name": "keyword", "short": "k", "default": ""},
            {"name": "speed", "short": "s", "default": ""},
            {"name": "print_logs", "short": "p", "default": False, "type": bool},
        ],
        "verbosity": 2,
    }


def task_format():
    """Format code using ruff."""
    return {
        "actions": [
            "ruff check --select I --fix src/bciremote test dodo.py",
            "ruff format src/bciremote test dodo.py",
        ],
        "verbosity": 2,
    }
