from typing import Protocol, List
from core import Comment, Issue


class IssueSource(Protocol):
    def export(self) -> List[Issue]:
        ...

    def comments(self, issue_id: str) -> List[Comment]:
        ...


class IssueWriter(Protocol):
    def create(self, title: str, issue_type: str = "task", priority: int = 2, parent_id: str = "") -> Issue:
        ...

    def update_status(self, issue_id: str, status: str) -> None:
        ...

    def reopen(self, issue_id: str) -> None:
        ...

    def delete(self, issue_id: str, cascade: bool = False) -> None:
        ...

    def add_comment(self, issue_id: str, text: str) -> None:
        ...

    def add_label(self, issue_id: str, label: str) -> None:
        ...

    def remove_label(self, issue_id: str, label: str) -> None:
        ...
