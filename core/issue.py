import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .status import Status, is_closed, is_in_progress, is_open

DEP_PARENT_CHILD = "parent-child"
DEP_BLOCKS = "blocks"
DEP_RELATED = "related"
DEP_DISCOVERED_FROM = "discovered-from"

DEPENDENCY_TYPES = (DEP_PARENT_CHILD, DEP_BLOCKS, DEP_RELATED, DEP_DISCOVERED_FROM)


@dataclass(frozen=True)
class Dependency:
    """Outgoing edge: this issue depends on `target_id`."""

    target_id: str
    dep_type: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        target = data.get("depends_on_id") or data.get("id") or ""
        dep_type = data.get("dependency_type") or data.get("type") or ""
        return cls(target_id=str(target).strip(), dep_type=str(dep_type).strip())


@dataclass(frozen=True)
class Dependent:
    """Reverse edge: `issue_id` depends on this issue."""

    issue_id: str
    dep_type: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependent":
        source = data.get("issue_id") or data.get("id") or ""
        dep_type = data.get("dependency_type") or data.get("type") or ""
        return cls(issue_id=str(source).strip(), dep_type=str(dep_type).strip())


@dataclass
class Comment:
    id: int
    issue_id: str
    author: str
    text: str
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=int(data.get("id") or 0),
            issue_id=str(data.get("issue_id") or ""),
            author=str(data.get("author") or ""),
            text=str(data.get("text") or ""),
            created_at=str(data.get("created_at") or ""),
        )


@dataclass
class Issue:
    id: str
    title: str
    status: str = "open"
    priority: int = 2
    issue_type: str = "task"
    description: str = ""
    design: str = ""
    acceptance_criteria: str = ""
    notes: str = ""
    assignee: str = ""
    created_at: str = ""
    updated_at: str = ""
    closed_at: str = ""
    external_ref: str = ""
    labels: List[str] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    dependencies: List[Dependency] = field(default_factory=list)
    dependents: List[Dependent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        """Build an issue from the beads JSON export shape."""
        issue_id = str(data.get("id") or "").strip()
        if not issue_id:
            raise ValueError("issue record is missing an id")
        try:
            priority = int(data.get("priority", 2) or 0)
        except (TypeError, ValueError):
            raise ValueError(f"{issue_id}: invalid priority {data.get('priority')!r}")
        return cls(
            id=issue_id,
            title=str(data.get("title") or ""),
            status=str(data.get("status") or "open").strip().lower(),
            priority=priority,
            issue_type=str(data.get("issue_type") or "task"),
            description=str(data.get("description") or ""),
            design=str(data.get("design") or ""),
            acceptance_criteria=str(data.get("acceptance_criteria") or ""),
            notes=str(data.get("notes") or ""),
            assignee=str(data.get("assignee") or ""),
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
            closed_at=str(data.get("closed_at") or ""),
            external_ref=str(data.get("external_ref") or ""),
            labels=[str(x) for x in (data.get("labels") or [])],
            comments=[Comment.from_dict(c) for c in (data.get("comments") or [])],
            dependencies=[Dependency.from_dict(d) for d in (data.get("dependencies") or [])],
            dependents=[Dependent.from_dict(d) for d in (data.get("dependents") or [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority,
            "issue_type": self.issue_type,
            "description": self.description,
            "design": self.design,
            "acceptance_criteria": self.acceptance_criteria,
            "notes": self.notes,
            "assignee": self.assignee,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "closed_at": self.closed_at,
            "external_ref": self.external_ref,
            "labels": list(self.labels),
            "comments": [c.__dict__.copy() for c in self.comments],
            "dependencies": [{"id": d.target_id, "dependency_type": d.dep_type} for d in self.dependencies],
            "dependents": [{"id": d.issue_id, "dependency_type": d.dep_type} for d in self.dependents],
        }

    @property
    def status_value(self) -> Status:
        return Status.from_string(self.status)

    @property
    def is_closed(self) -> bool:
        return is_closed(self.status)

    @property
    def is_in_progress(self) -> bool:
        return is_in_progress(self.status)

    @property
    def is_open(self) -> bool:
        return is_open(self.status)

    def parent_ids(self) -> List[str]:
        return [d.target_id for d in self.dependencies if d.dep_type == DEP_PARENT_CHILD and d.target_id]

    def version_marker(self) -> str:
        """Cheap change marker compared across refreshes."""
        return f"{self.title}|{self.status}|{self.priority}|{self.updated_at}"


_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC3339 timestamp; None when blank or malformed.

    Fractional seconds of any length (bd writes nanoseconds) are cut or padded
    to microseconds first.
    """
    raw = (value or "").strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    raw = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), raw, count=1)
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


__all__ = [
    "DEP_PARENT_CHILD",
    "DEP_BLOCKS",
    "DEP_RELATED",
    "DEP_DISCOVERED_FROM",
    "DEPENDENCY_TYPES",
    "Dependency",
    "Dependent",
    "Comment",
    "Issue",
    "parse_timestamp",
]
