"""Ticket data models for Forge CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class TicketStatus(Enum):
    """Backend ticket lifecycle states."""
    DRAFT = "DRAFT"
    IN_QUESTION_ROUND_1 = "IN_QUESTION_ROUND_1"
    IN_QUESTION_ROUND_2 = "IN_QUESTION_ROUND_2"
    IN_QUESTION_ROUND_3 = "IN_QUESTION_ROUND_3"
    QUESTIONS_COMPLETE = "QUESTIONS_COMPLETE"
    VALIDATED = "VALIDATED"
    READY = "READY"
    FORGED = "FORGED"
    EXECUTING = "EXECUTING"
    WAITING_FOR_APPROVAL = "WAITING_FOR_APPROVAL"
    CREATED = "CREATED"
    DRIFTED = "DRIFTED"
    COMPLETE = "COMPLETE"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


# Unknown statuses from a newer backend are kept as raw strings
StatusValue = Union[TicketStatus, str]


def parse_status(raw: Optional[str]) -> StatusValue:
    """Return the matching TicketStatus, or the raw string if unknown."""
    try:
        return TicketStatus(raw)
    except ValueError:
        return raw or ""


def status_value(status: StatusValue) -> str:
    return status.value if isinstance(status, TicketStatus) else status


@dataclass
class FileChange:
    """A file the ticket expects to be created, modified or deleted."""
    path: str
    action: str
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "FileChange":
        return cls(path=data.get("path", ""), action=data.get("action", ""), notes=data.get("notes"))


@dataclass
class QAItem:
    """A question/answer pair collected during a review or implementation session."""
    question: str
    answer: str

    def to_dict(self) -> dict:
        return {"question": self.question, "answer": self.answer}


@dataclass
class TicketListItem:
    """Summary row returned by `GET /tickets`."""
    id: str
    title: str
    status: StatusValue
    priority: Optional[str] = None
    assigned_to: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "TicketListItem":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            status=parse_status(data.get("status")),
            priority=data.get("priority"),
            assigned_to=data.get("assignedTo"),
        )


@dataclass
class TicketDetail(TicketListItem):
    """Full ticket returned by `GET /tickets/{id}`."""
    description: Optional[str] = None
    acceptance_criteria: list[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    file_changes: list[FileChange] = field(default_factory=list)
    problem_statement: Optional[str] = None
    solution: Optional[str] = None
    api_changes: Optional[str] = None
    test_plan: Optional[str] = None
    design_refs: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "TicketDetail":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            status=parse_status(data.get("status")),
            priority=data.get("priority"),
            assigned_to=data.get("assignedTo"),
            description=data.get("description"),
            acceptance_criteria=list(data.get("acceptanceCriteria") or []),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            file_changes=[FileChange.from_dict(fc) for fc in data.get("fileChanges") or []],
            problem_statement=data.get("problemStatement"),
            solution=data.get("solution"),
            api_changes=data.get("apiChanges"),
            test_plan=data.get("testPlan"),
            design_refs=list(data.get("designRefs") or []),
        )
