"""
Error vocabulary.

SubprocessFailure and its subclasses describe process mechanics and are raised
by executors. Conflict, NotFound, DeleteFailed and ToolMissing are semantic
outcomes raised by the Ipvs facade after interpreting executor results.
"""

from typing import List, Optional, Sequence


class LvsError(Exception):
    """Base class for everything lvsctl raises."""


class SubprocessFailure(LvsError):
    """A command could not be spawned, fed, or finished cleanly.

    Keeps the underlying cause and the captured output as separate fields;
    str() renders them as one message.
    """

    separator = ": "

    def __init__(
        self,
        cause: BaseException,
        output: bytes = b"",
        argv: Optional[Sequence[str]] = None,
        separator: Optional[str] = None,
    ) -> None:
        self.cause = cause
        self.output = output or b""
        self.argv: List[str] = list(argv or [])
        if separator is not None:
            self.separator = separator
        super().__init__(self.render())

    def render(self) -> str:
        text = str(self.cause) or type(self.cause).__name__
        return text + self.separator + self.output.decode("utf-8", errors="replace")


class SpawnFailure(SubprocessFailure):
    """Process could not be created (missing binary, permission denied)."""


class WriteFailure(SubprocessFailure):
    """Standard input could not be fully delivered."""


class WaitFailure(SubprocessFailure):
    """Process exited non-zero or could not be waited on."""


class Conflict(LvsError):
    def __init__(self, message: str = "object already exists") -> None:
        super().__init__(message)


class NotFound(LvsError):
    def __init__(self, message: str = "object was not found") -> None:
        super().__init__(message)


class DeleteFailed(LvsError):
    def __init__(self, message: str = "object was not deleted") -> None:
        super().__init__(message)


class ToolMissing(LvsError):
    def __init__(self, message: str = "unable to find the ipvsadm command on the system") -> None:
        super().__init__(message)
