from typing import Optional, Sequence


class RunCommandError(Exception):
    """Raised by run_command when a command exits non-zero or cannot be started"""

    def __init__(
        self,
        error_msg: str,
        return_code: int,
        cmd: Optional[Sequence[str]] = None,
    ):
        super().__init__(error_msg)
        self.error_msg = error_msg
        self.return_code = return_code
        self.cmd = list(cmd) if cmd is not None else []

    def __str__(self) -> str:
        if self.cmd:
            return f"{' '.join(self.cmd)} failed ({self.return_code}): {self.error_msg.strip()}"
        return self.error_msg.strip()
