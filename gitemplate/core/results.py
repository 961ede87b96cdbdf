"""Result and event types shared by the shell wrapper and the pipeline."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


class ResultKind(Enum):
    """Where a result came from."""

    COMMAND = "command"
    PRECONDITION = "precondition"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command or pipeline step.

    Attributes:
        code: Exit status; 0 means success
        output: Captured stdout/stderr, or a diagnostic message
        kind: COMMAND for real command output, PRECONDITION for checks
            that failed before any command ran
    """

    code: int = 0
    output: str = ""
    kind: ResultKind = ResultKind.COMMAND

    @property
    def ok(self) -> bool:
        return self.code == 0

    @classmethod
    def success(cls, output: str = "") -> "CommandResult":
        return cls(code=0, output=output)

    @classmethod
    def failure(cls, output: str, code: int = 1) -> "CommandResult":
        return cls(code=code, output=output)

    @classmethod
    def precondition(cls, output: str) -> "CommandResult":
        return cls(code=1, output=output, kind=ResultKind.PRECONDITION)


@dataclass(frozen=True)
class ExecutionEvent:
    """Record of a single ShellExecutor call, passed to observers."""

    method: str
    arguments: Tuple[Any, ...]
    result: Any
