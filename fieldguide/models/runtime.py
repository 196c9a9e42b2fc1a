from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias, TypeVar

from result import Result

from fieldguide.models.enums import CommandStatus


class RuntimeErrorCode(str, Enum):
    NOT_INSTALLED = "not_installed"
    COMMAND_FAILED = "command_failed"
    PARSE_ERROR = "parse_error"


@dataclass(slots=True, frozen=True)
class RuntimeCallError:
    code: RuntimeErrorCode
    command: tuple[str, ...]
    message: str
    returncode: int | None = None

    @property
    def exit_code(self) -> int:
        if self.returncode:
            return self.returncode
        return 1


T = TypeVar("T")

RuntimeResult: TypeAlias = Result[T, RuntimeCallError]


@dataclass(slots=True, frozen=True)
class CommandOutcome:
    status: CommandStatus
    error: RuntimeCallError | None = None

    @property
    def exit_code(self) -> int:
        if self.status is CommandStatus.PRECONDITION_FAILED:
            return 1
        if self.status is CommandStatus.FAILED:
            return self.error.exit_code if self.error is not None else 1
        return 0
