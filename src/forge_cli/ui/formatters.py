"""Status labels and rich renderables for CLI output."""

from __future__ import annotations

from typing import Optional

from rich.markdown import Markdown
from rich.table import Table

from ..models.ticket import StatusValue, TicketDetail, TicketListItem, TicketStatus, status_value

STATUS_ICONS = {
    TicketStatus.DRAFT: "⬜",
    TicketStatus.IN_QUESTION_ROUND_1: "💬",
    TicketStatus.IN_QUESTION_ROUND_2: "💬",
    TicketStatus.IN_QUESTION_ROUND_3: "💬",
    TicketStatus.QUESTIONS_COMPLETE: "✅",
    TicketStatus.VALIDATED: "✅",
    TicketStatus.READY: "🚀",
    TicketStatus.FORGED: "🔨",
    TicketStatus.EXECUTING: "⚙️",
    TicketStatus.WAITING_FOR_APPROVAL: "⏳",
    TicketStatus.CREATED: "📝",
    TicketStatus.DRIFTED: "⚠️",
    TicketStatus.COMPLETE: "✅",
}

# Lifecycle names shown to users instead of backend enum values
STATUS_DISPLAY_NAMES = {
    TicketStatus.DRAFT: "Define",
    TicketStatus.IN_QUESTION_ROUND_1: "Questions (1)",
    TicketStatus.IN_QUESTION_ROUND_2: "Questions (2)",
    TicketStatus.IN_QUESTION_ROUND_3: "Questions (3)",
    TicketStatus.QUESTIONS_COMPLETE: "Questions Done",
    TicketStatus.VALIDATED: "Dev-Refine",
    TicketStatus.READY: "Execute",
    TicketStatus.FORGED: "Forged",
    TicketStatus.EXECUTING: "Executing",
    TicketStatus.WAITING_FOR_APPROVAL: "Approve",
    TicketStatus.CREATED: "Exported",
    TicketStatus.DRIFTED: "Drifted",
    TicketStatus.COMPLETE: "Done",
}

UNKNOWN_ICON = "❓"
NO_VALUE = "—"
TITLE_WIDTH = 50


def status_icon(status: StatusValue) -> str:
    return STATUS_ICONS.get(status, UNKNOWN_ICON)


def status_label(status: StatusValue) -> str:
    return STATUS_DISPLAY_NAMES.get(status, status_value(status))


def truncate(text: str, width: int = TITLE_WIDTH) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def assignee_name(assigned_to: Optional[str], names: Optional[dict[str, str]] = None) -> str:
    if not assigned_to:
        return NO_VALUE
    return (names or {}).get(assigned_to, assigned_to)


def tickets_table(
    tickets: list[TicketListItem],
    names: Optional[dict[str, str]] = None,
    title: Optional[str] = None,
) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("Status", no_wrap=True)
    table.add_column("Assignee")
    table.add_column("Priority")
    for t in tickets:
        table.add_row(
            t.id,
            truncate(t.title),
            f"{status_icon(t.status)} {status_label(t.status)}",
            assignee_name(t.assigned_to, names),
            t.priority or NO_VALUE,
        )
    return table


def tickets_markdown(
    tickets: list[TicketListItem],
    names: Optional[dict[str, str]] = None,
) -> str:
    """Markdown table used by the `list` prompt."""
    rows = [
        "| ID | Title | Status | Assignee | Priority |",
        "|-----|-------|--------|----------|----------|",
    ]
    for t in tickets:
        rows.append(
            f"| `{t.id}` | {truncate(t.title)} | {status_icon(t.status)} {status_label(t.status)} "
            f"| {assignee_name(t.assigned_to, names)} | {t.priority or NO_VALUE} |"
        )
    return "\n".join(rows)


def ticket_markdown(ticket: TicketDetail, names: Optional[dict[str, str]] = None) -> str:
    """Full ticket as markdown sections. Empty sections are omitted."""
    lines = [f"# [{ticket.id}] {ticket.title}", ""]
    lines.append(f"**Status:** {status_icon(ticket.status)} {status_label(ticket.status)}  ")
    if ticket.priority:
        lines.append(f"**Priority:** {ticket.priority.upper()}  ")
    if ticket.assigned_to:
        lines.append(f"**Assignee:** {assignee_name(ticket.assigned_to, names)}  ")

    for heading, body in (
        ("Description", ticket.description),
        ("Problem Statement", ticket.problem_statement),
        ("Solution", ticket.solution),
    ):
        if body:
            lines += ["", f"## {heading}", body]

    if ticket.acceptance_criteria:
        lines += ["", "## Acceptance Criteria"]
        lines += [f"{i}. {ac}" for i, ac in enumerate(ticket.acceptance_criteria, 1)]

    if ticket.file_changes:
        lines += ["", "## File Changes"]
        for fc in ticket.file_changes:
            notes = f" - {fc.notes}" if fc.notes else ""
            lines.append(f"- `{fc.action.upper()}` {fc.path}{notes}")

    for heading, body in (("API Changes", ticket.api_changes), ("Test Plan", ticket.test_plan)):
        if body:
            lines += ["", f"## {heading}", body]

    if ticket.design_refs:
        lines += ["", "## Design References"]
        lines += [f"- {ref}" for ref in ticket.design_refs]

    return "\n".join(lines)


def ticket_view(ticket: TicketDetail, names: Optional[dict[str, str]] = None) -> Markdown:
    return Markdown(ticket_markdown(ticket, names))
