from typing import Optional, Sequence


class CommandResult:
    """Returned by run_command"""

    def __init__(
        self,
        stdout: str,
        stderr: str,
        return_code: int,
        cmd: Optional[Sequence[str]] = None,
    ):
        self.stdout = stdout
        self.stderr = stderr
        self.return_code = return_code
        self.cmd = list(cmd) if cmd is not None else []
        self.success = self.return_code == 0

    def __repr__(self) -> str:
        return (
            f"CommandResult(cmd={self.cmd!r}, return_code={self.return_code}, "
            f"stdout={self.stdout!r}, stderr={self.stderr!r})"
        )
