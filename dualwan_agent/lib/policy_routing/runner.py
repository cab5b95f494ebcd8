import logging
from typing import Protocol, Sequence

from dualwan_agent.models.command_result import CommandResult
from dualwan_agent.models.runcommand_error import RunCommandError
from dualwan_agent.utils import run_command

from .errors import CommandExecutionError


class CommandRunner(Protocol):
    """Runs one network configuration command.

    Implementations return the captured result on success and raise
    CommandExecutionError when the command exits non-zero or cannot be started.
    """

    def run(self, cmd: Sequence[str]) -> CommandResult: ...


class SubprocessCommandRunner:
    """CommandRunner backed by subprocess. Calls block until the command exits."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def run(self, cmd: Sequence[str]) -> CommandResult:
        try:
            return run_command(cmd)
        except RunCommandError as e:
            self.logger.debug(f"Command failed: {e}")
            raise CommandExecutionError.from_run_error(e) from e
