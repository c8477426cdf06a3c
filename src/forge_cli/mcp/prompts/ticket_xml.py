"""XML serialization of tickets for prompt context."""

from __future__ import annotations

from ...models.ticket import TicketDetail, status_value


def escape_xml(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _acceptance_criteria(ticket: TicketDetail) -> str:
    return "\n".join(f"    <item>{escape_xml(ac)}</item>" for ac in ticket.acceptance_criteria)


def _file_changes(ticket: TicketDetail) -> str:
    return "\n".join(
        f'    <change path="{escape_xml(fc.path)}" action="{escape_xml(fc.action)}">'
        f"{escape_xml(fc.notes) if fc.notes else ''}</change>"
        for fc in ticket.file_changes
    )


def serialize_ticket(
    ticket: TicketDetail,
    include_file_changes: bool = True,
    include_plan: bool = False,
) -> str:
    """Render a ticket as an XML block.

    Reviews only need the summary; implementation prompts add file changes and,
    for guided development, the API changes and test plan.
    """
    lines = [
        f'<ticket id="{escape_xml(ticket.id)}" status="{escape_xml(status_value(ticket.status))}">',
        f"  <title>{escape_xml(ticket.title)}</title>",
        f"  <description>{escape_xml(ticket.description or '')}</description>",
        f"  <problemStatement>{escape_xml(ticket.problem_statement or '')}</problemStatement>",
        f"  <solution>{escape_xml(ticket.solution or '')}</solution>",
        "  <acceptanceCriteria>",
        _acceptance_criteria(ticket),
        "  </acceptanceCriteria>",
    ]
    if include_file_changes:
        lines += ["  <fileChanges>", _file_changes(ticket), "  </fileChanges>"]
    if include_plan:
        lines += [
            f"  <apiChanges>{escape_xml(ticket.api_changes or '')}</apiChanges>",
            f"  <testPlan>{escape_xml(ticket.test_plan or '')}</testPlan>",
        ]
    lines.append("</ticket>")
    return "\n".join(lines)


def wrap_prompt(guide: str, ticket_xml: str) -> str:
    return f"<agent_guide>\n{guide}\n</agent_guide>\n<ticket_context>\n{ticket_xml}\n</ticket_context>"
