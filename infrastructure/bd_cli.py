"""Thin wrapper around the ``bd`` command line for write operations."""

import json
import subprocess
from pathlib import Path
from typing import List, Optional

from core import Issue
from core.errors import CliError, ErrorCode, IssueLinkError, SourceError
from core.status import normalize_issue_status
from application.ports import IssueWriter

MAX_ERROR_SNIPPET = 400


def extract_json(output: str) -> Optional[str]:
    """First balanced JSON object in `output` (bd may print warnings before it)."""
    start = output.find("{")
    if start < 0:
        return None
    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(output)):
        ch = output[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return output[start : idx + 1]
    return None


def _snippet(text: str) -> str:
    text = (text or "").strip()
    if len(text) > MAX_ERROR_SNIPPET:
        return text[:MAX_ERROR_SNIPPET] + "..."
    return text


class BdCliWriter(IssueWriter):
    def __init__(self, binary: str = "bd", db_path: Optional[Path] = None, timeout: float = 30.0):
        self.binary = binary
        self.db_args: List[str] = ["--db", str(db_path)] if db_path else []
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        command = [*self.db_args, *args]
        try:
            result = subprocess.run(
                [self.binary, *command],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise CliError(self.binary, command, f"{self.binary} binary not found in PATH", code=ErrorCode.CLI_NOT_FOUND) from exc
        except subprocess.TimeoutExpired as exc:
            raise CliError(self.binary, command, f"timed out after {self.timeout:g}s") from exc
        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            raise CliError(self.binary, command, _snippet(output))
        return output

    def create(self, title: str, issue_type: str = "task", priority: int = 2, parent_id: str = "") -> Issue:
        """Create an issue and, when `parent_id` is given, link it as a child."""
        if not (title or "").strip():
            raise ValueError("title is required for create")
        output = self._run(
            "create",
            "--title",
            title.strip(),
            "--type",
            (issue_type or "").strip() or "task",
            "--priority",
            str(int(priority)),
            "--json",
        )
        payload = extract_json(output)
        if payload is None:
            raise SourceError(f"no JSON found in bd create output: {_snippet(output)}", code=ErrorCode.PARSE_FAILED)
        try:
            issue = Issue.from_dict(json.loads(payload))
        except (json.JSONDecodeError, ValueError) as exc:
            raise SourceError(f"decode bd create output: {exc}", code=ErrorCode.PARSE_FAILED) from exc

        if parent_id.strip():
            try:
                self.add_dependency(issue.id, parent_id.strip(), "parent-child")
            except CliError as exc:
                raise IssueLinkError(issue, parent_id.strip(), exc) from exc
        return issue

    def add_dependency(self, from_id: str, to_id: str, dep_type: str = "blocks") -> None:
        if not from_id.strip() or not to_id.strip():
            raise ValueError("both issue ids are required for add dependency")
        self._run("dep", "add", from_id, to_id, "--type", dep_type or "blocks")

    def update_status(self, issue_id: str, status: str) -> None:
        if not issue_id.strip():
            raise ValueError("issue id is required for status update")
        self._run("update", issue_id, f"--status={normalize_issue_status(status)}")

    def reopen(self, issue_id: str) -> None:
        if not issue_id.strip():
            raise ValueError("issue id is required for reopen")
        self._run("reopen", issue_id)

    def delete(self, issue_id: str, cascade: bool = False) -> None:
        """Delete without bd's own confirmation; `cascade` also removes descendants."""
        if not issue_id.strip():
            raise ValueError("issue id is required for delete")
        args = ["delete", issue_id, "--force"]
        if cascade:
            args.append("--cascade")
        self._run(*args)

    def add_comment(self, issue_id: str, text: str) -> None:
        if not issue_id.strip():
            raise ValueError("issue id is required for add comment")
        if not (text or "").strip():
            raise ValueError("comment text is required")
        self._run("comments", "add", issue_id, text.strip())

    def add_label(self, issue_id: str, label: str) -> None:
        if not issue_id.strip() or not (label or "").strip():
            raise ValueError("issue id and label are required for add label")
        self._run("label", "add", issue_id, label.strip())

    def remove_label(self, issue_id: str, label: str) -> None:
        if not issue_id.strip() or not (label or "").strip():
            raise ValueError("issue id and label are required for remove label")
        self._run("label", "remove", issue_id, label.strip())


__all__ = ["BdCliWriter", "extract_json"]
