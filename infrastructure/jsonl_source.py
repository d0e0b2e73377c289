import json
import logging
from pathlib import Path
from typing import Dict, List, Set

from core import Comment, Issue
from core.errors import SourceError
from application.ports import IssueSource

logger = logging.getLogger("beadtree.source")


class JsonlIssueSource(IssueSource):
    """Issues from a beads ``issues.jsonl`` export, one JSON object per line."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._comments: Dict[str, List[Comment]] = {}

    def export(self) -> List[Issue]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceError(f"read {self.path}: {exc}") from exc

        issues: List[Issue] = []
        hidden: Set[str] = set()
        comments: Dict[str, List[Comment]] = {}
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                issue = Issue.from_dict(data)
            except (json.JSONDecodeError, ValueError) as exc:
                raise SourceError(f"{self.path}:{lineno}: {exc}") from exc
            if (data.get("status") or "").strip().lower() == "tombstone" or data.get("deleted_at"):
                hidden.add(issue.id)
                continue
            comments[issue.id] = issue.comments
            issue.comments = []
            issues.append(issue)
        if hidden:
            self._drop_hidden_edges(issues, hidden)
        self._comments = comments
        return issues

    def comments(self, issue_id: str) -> List[Comment]:
        return list(self._comments.get(issue_id, []))

    @staticmethod
    def _drop_hidden_edges(issues: List[Issue], hidden: Set[str]) -> None:
        for issue in issues:
            kept = [dep for dep in issue.dependencies if dep.target_id not in hidden]
            if len(kept) != len(issue.dependencies):
                logger.debug("%s: dropped %d edges to deleted issues", issue.id, len(issue.dependencies) - len(kept))
                issue.dependencies = kept
            issue.dependents = [dep for dep in issue.dependents if dep.issue_id not in hidden]


__all__ = ["JsonlIssueSource"]
