import logging
import subprocess
from typing import Sequence

from dualwan_agent.models.command_result import CommandResult
from dualwan_agent.models.runcommand_error import RunCommandError

logger = logging.getLogger(__name__)


def run_command(cmd: Sequence[str], raise_on_fail: bool = True) -> CommandResult:
    """Run a single CLI command with subprocess and returns the output"""
    cmd = list(cmd)
    logger.debug(f"Running command: {' '.join(cmd)}")
    try:
        cp = subprocess.run(
            cmd,
            encoding="utf-8",
            check=False,
            capture_output=True,
        )
    except OSError as e:
        # Executable missing or not runnable; there is no exit status.
        raise RunCommandError(str(e), -1, cmd) from e

    if raise_on_fail and cp.returncode != 0:
        raise RunCommandError(cp.stderr, cp.returncode, cmd)
    return CommandResult(cp.stdout, cp.stderr, cp.returncode, cmd)


def get_full_class_name(obj: object) -> str:
    """
    Gets the full class name and path of an object for use in errors.
    :param obj: The object to get the name and path of
    :return: The full name and path as a string.
    """
    module = obj.__class__.__module__
    if module is None or module == str.__class__.__module__:
        return obj.__class__.__name__
    return module + "." + obj.__class__.__name__
