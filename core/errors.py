"""Structured errors shared across the graph, refresh and injection layers."""

from enum import Enum
from typing import Iterable, Optional


class ErrorCode(str, Enum):
    UNKNOWN = "unknown"
    CLI_NOT_FOUND = "cli_not_found"
    CLI_FAILED = "cli_failed"
    PARSE_FAILED = "parse_failed"
    NOT_FOUND = "not_found"
    SOURCE_FAILED = "source_failed"
    REFRESH_TIMEOUT = "refresh_timeout"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    DANGLING_REFERENCE = "dangling_reference"
    INVALID_ISSUE_DATA = "invalid_issue_data"
    INJECTION_FAILED = "injection_failed"
    CONFIGURATION_ERROR = "configuration_error"


class BeadtreeError(Exception):
    """Base error carrying a machine-readable code plus message."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str = "", *, code: Optional[ErrorCode] = None):
        if code is not None:
            self.code = code
        self.message = message or self.code.value
        super().__init__(self.message)


class GraphBuildError(BeadtreeError):
    code = ErrorCode.INVALID_ISSUE_DATA


class CyclicDependencyError(GraphBuildError):
    code = ErrorCode.CYCLIC_DEPENDENCY

    def __init__(self, path: Iterable[str]):
        self.path = list(path)
        super().__init__(f"cyclic dependency detected: {' -> '.join(self.path)}")


class DanglingReferenceError(GraphBuildError):
    code = ErrorCode.DANGLING_REFERENCE

    def __init__(self, issue_id: str, target_id: str, dep_type: str):
        self.issue_id = issue_id
        self.target_id = target_id
        self.dep_type = dep_type
        super().__init__(f"{issue_id}: {dep_type} edge references unknown issue {target_id}")


class InvalidIssueDataError(GraphBuildError):
    code = ErrorCode.INVALID_ISSUE_DATA


class SourceError(BeadtreeError):
    code = ErrorCode.SOURCE_FAILED


class CliError(SourceError):
    code = ErrorCode.CLI_FAILED

    def __init__(self, binary: str, command: Iterable[str], output: str = "", *, code: Optional[ErrorCode] = None):
        self.binary = binary or "bd"
        self.command = list(command)
        self.output = (output or "").strip()
        detail = self.output or "command failed"
        super().__init__(f"{self.binary} {' '.join(self.command)} failed: {detail}", code=code)


class IssueLinkError(CliError):
    """The issue was created but linking it under its parent failed."""

    def __init__(self, issue, parent_id: str, cause: CliError):
        super().__init__(cause.binary, cause.command, cause.output, code=cause.code)
        self.issue = issue
        self.parent_id = parent_id


class RefreshTimeoutError(SourceError):
    code = ErrorCode.REFRESH_TIMEOUT


class InjectionError(BeadtreeError):
    code = ErrorCode.INJECTION_FAILED


class ConfigError(BeadtreeError):
    code = ErrorCode.CONFIGURATION_ERROR


def code_of(exc: BaseException) -> ErrorCode:
    """Walk the cause chain and return the first structured code found."""
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, BeadtreeError):
            return current.code
        current = current.__cause__
    return ErrorCode.UNKNOWN


__all__ = [
    "ErrorCode",
    "BeadtreeError",
    "GraphBuildError",
    "CyclicDependencyError",
    "DanglingReferenceError",
    "InvalidIssueDataError",
    "SourceError",
    "CliError",
    "IssueLinkError",
    "RefreshTimeoutError",
    "InjectionError",
    "ConfigError",
    "code_of",
]
