import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Set

from core import Comment, Dependency, Dependent, Issue
from core.errors import SourceError
from application.ports import IssueSource

logger = logging.getLogger("beadtree.source")

ISSUES_QUERY = """
    SELECT id, title, description, design, acceptance_criteria, notes,
           status, priority, issue_type, COALESCE(assignee, ''),
           created_at, updated_at, COALESCE(closed_at, ''), COALESCE(external_ref, '')
    FROM issues
    WHERE status != 'tombstone' AND deleted_at IS NULL
    ORDER BY created_at, id
"""

HIDDEN_QUERY = "SELECT id FROM issues WHERE status = 'tombstone' OR deleted_at IS NOT NULL"
LABELS_QUERY = "SELECT issue_id, label FROM labels ORDER BY issue_id, label"
DEPENDENCIES_QUERY = "SELECT issue_id, depends_on_id, type FROM dependencies"
COMMENTS_QUERY = """
    SELECT id, issue_id, author, text, created_at
    FROM comments
    WHERE issue_id = ?
    ORDER BY created_at, id
"""


def _text(value) -> str:
    return "" if value is None else str(value)


class SQLiteIssueSource(IssueSource):
    """Read-only view over a beads SQLite database."""

    def __init__(self, db_path: Path, timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            return sqlite3.connect(uri, uri=True, timeout=self.timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            raise SourceError(f"open {self.db_path}: {exc}") from exc

    def export(self) -> List[Issue]:
        conn = self._connect()
        try:
            issues = self._load_issues(conn)
            by_id = {issue.id: issue for issue in issues}
            self._load_labels(conn, by_id)
            self._load_dependencies(conn, by_id, self._hidden_ids(conn))
        except sqlite3.Error as exc:
            raise SourceError(f"read {self.db_path}: {exc}") from exc
        finally:
            conn.close()
        return issues

    def comments(self, issue_id: str) -> List[Comment]:
        conn = self._connect()
        try:
            rows = conn.execute(COMMENTS_QUERY, (issue_id,)).fetchall()
        except sqlite3.Error as exc:
            raise SourceError(f"query comments for {issue_id}: {exc}") from exc
        finally:
            conn.close()
        return [
            Comment(id=int(row[0] or 0), issue_id=_text(row[1]), author=_text(row[2]), text=_text(row[3]), created_at=_text(row[4]))
            for row in rows
        ]

    @staticmethod
    def _load_issues(conn: sqlite3.Connection) -> List[Issue]:
        issues: List[Issue] = []
        for row in conn.execute(ISSUES_QUERY):
            try:
                priority = int(row[7] if row[7] is not None else 2)
            except (TypeError, ValueError):
                priority = 2
            issues.append(
                Issue(
                    id=_text(row[0]),
                    title=_text(row[1]),
                    description=_text(row[2]),
                    design=_text(row[3]),
                    acceptance_criteria=_text(row[4]),
                    notes=_text(row[5]),
                    status=_text(row[6]).strip().lower() or "open",
                    priority=priority,
                    issue_type=_text(row[8]) or "task",
                    assignee=_text(row[9]),
                    created_at=_text(row[10]),
                    updated_at=_text(row[11]),
                    closed_at=_text(row[12]),
                    external_ref=_text(row[13]),
                )
            )
        return issues

    @staticmethod
    def _hidden_ids(conn: sqlite3.Connection) -> Set[str]:
        return {_text(row[0]) for row in conn.execute(HIDDEN_QUERY)}

    @staticmethod
    def _load_labels(conn: sqlite3.Connection, by_id: Dict[str, Issue]) -> None:
        for issue_id, label in conn.execute(LABELS_QUERY):
            issue = by_id.get(_text(issue_id))
            if issue is not None:
                issue.labels.append(_text(label))

    @staticmethod
    def _load_dependencies(conn: sqlite3.Connection, by_id: Dict[str, Issue], hidden: Set[str]) -> None:
        for issue_id, depends_on_id, dep_type in conn.execute(DEPENDENCIES_QUERY):
            issue_id, depends_on_id, dep_type = _text(issue_id), _text(depends_on_id), _text(dep_type)
            if issue_id in hidden or depends_on_id in hidden:
                logger.debug("skipping edge %s -> %s to a deleted issue", issue_id, depends_on_id)
                continue
            issue = by_id.get(issue_id)
            if issue is None:
                continue
            issue.dependencies.append(Dependency(depends_on_id, dep_type))
            target = by_id.get(depends_on_id)
            if target is not None:
                target.dependents.append(Dependent(issue_id, dep_type))


__all__ = ["SQLiteIssueSource"]
