from typing import Optional, Sequence

from dualwan_agent.models.runcommand_error import RunCommandError


class PolicyRoutingError(Exception):
    """Base class for errors raised by the policy routing engine"""


class ValidationError(PolicyRoutingError):
    """A switch request carried a malformed ip or an unknown nic"""


class DiscoveryError(PolicyRoutingError):
    """No default gateway could be found for an interface"""

    def __init__(self, interface: str):
        super().__init__(f"Could not determine default gateway for iface {interface}")
        self.interface = interface


class CommandExecutionError(PolicyRoutingError):
    """An external command could not be started or exited non-zero"""

    def __init__(
        self,
        stderr: str,
        return_code: int,
        command: Optional[Sequence[str]] = None,
    ):
        self.stderr = stderr
        self.return_code = return_code
        self.command = list(command) if command is not None else []
        super().__init__(
            f"{' '.join(self.command)} failed ({return_code}): {stderr.strip()}"
        )

    @classmethod
    def from_run_error(cls, error: RunCommandError) -> "CommandExecutionError":
        return cls(error.error_msg, error.return_code, error.cmd)
