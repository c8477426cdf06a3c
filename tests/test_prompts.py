"""Tests for MCP prompt construction."""

import pytest

from forge_cli.mcp.prompts import PROMPTS, develop, execute, review, ticket_list
from forge_cli.mcp.prompts.guides import load_guide
from forge_cli.mcp.prompts.ticket_xml import escape_xml, serialize_ticket, wrap_prompt
from forge_cli.models.ticket import TicketDetail

TICKET = {
    "id": "T-1",
    "title": "Handle <script> & \"quotes\"",
    "status": "READY",
    "description": "Users can't log in",
    "acceptanceCriteria": ["Login works", "Errors are shown"],
    "fileChanges": [{"path": "src/a&b.py", "action": "modify", "notes": "x < y"}],
    "apiChanges": "POST /auth/login",
    "testPlan": "Unit tests",
}


def text_of(result) -> str:
    return result.messages[0].content.text


class TestTicketXml:
    """XML rendering."""

    def test_escape_xml(self):
        assert escape_xml('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"

    def test_serialize_escapes_fields(self):
        xml = serialize_ticket(TicketDetail.from_dict(TICKET))

        assert "<title>Handle &lt;script&gt; &amp; &quot;quotes&quot;</title>" in xml
        assert '<change path="src/a&amp;b.py" action="modify">x &lt; y</change>' in xml
        assert "<item>Login works</item>" in xml
        assert "<apiChanges>" not in xml

    def test_summary_only(self):
        xml = serialize_ticket(TicketDetail.from_dict(TICKET), include_file_changes=False)

        assert "<fileChanges>" not in xml

    def test_plan_sections(self):
        xml = serialize_ticket(TicketDetail.from_dict(TICKET), include_plan=True)

        assert "<apiChanges>POST /auth/login</apiChanges>" in xml
        assert "<testPlan>Unit tests</testPlan>" in xml

    def test_wrap_prompt(self):
        text = wrap_prompt("guide", "<ticket/>")

        assert text.startswith("<agent_guide>\nguide\n</agent_guide>")
        assert text.endswith("<ticket_context>\n<ticket/>\n</ticket_context>")


class TestGuides:
    """Bundled agent guides."""

    @pytest.mark.parametrize("name", ["dev-executor", "dev-reviewer", "dev-implementer"])
    def test_guides_are_bundled(self, name):
        assert load_guide(name).strip()


class TestTicketPrompts:
    """forge-execute, forge-exec, forge-review, forge-develop."""

    @pytest.mark.asyncio
    async def test_missing_ticket_id(self, api, backend, session):
        result = await execute.handle({}, session, api)

        assert result.messages[0].role == "user"
        assert text_of(result) == "Error: Missing required argument: ticketId"
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_not_found(self, api, backend, session):
        backend.add("GET", "/tickets/T-404", 404)

        result = await review.handle({"ticketId": "T-404"}, session, api)

        assert text_of(result) == "Error: Ticket not found: T-404"

    @pytest.mark.asyncio
    async def test_server_failure_message(self, api, backend, session):
        backend.add("GET", "/tickets/T-1", 500)

        result = await execute.handle({"ticketId": "T-1"}, session, api)

        assert text_of(result).startswith("Error: ")

    @pytest.mark.asyncio
    async def test_execute_includes_guide_and_file_changes(self, api, backend, session):
        backend.add("GET", "/tickets/T-1", 200, TICKET)

        text = text_of(await execute.handle({"ticketId": "T-1"}, session, api))

        assert load_guide("dev-executor") in text
        assert "<fileChanges>" in text
        assert "<apiChanges>" not in text

    @pytest.mark.asyncio
    async def test_review_omits_file_changes(self, api, backend, session):
        backend.add("GET", "/tickets/T-1", 200, TICKET)

        text = text_of(await review.handle({"ticketId": "T-1"}, session, api))

        assert load_guide("dev-reviewer") in text
        assert "<fileChanges>" not in text

    @pytest.mark.asyncio
    async def test_develop_includes_plan(self, api, backend, session):
        backend.add("GET", "/tickets/T-1", 200, TICKET)

        text = text_of(await develop.handle({"ticketId": "T-1"}, session, api))

        assert load_guide("dev-implementer") in text
        assert "<apiChanges>POST /auth/login</apiChanges>" in text
        assert "<testPlan>Unit tests</testPlan>" in text

    def test_exec_alias_shares_handler(self):
        prompts = {spec.name: spec for spec in PROMPTS}

        assert prompts["forge-exec"].handler is prompts["forge-execute"].handler


class TestListPrompt:
    """The list prompt."""

    @pytest.mark.asyncio
    async def test_table_with_member_names(self, api, backend, session):
        backend.add("GET", "/tickets", 200, [
            {"id": "T-1", "title": "Add login", "status": "READY", "assignedTo": "user-2", "priority": "high"},
        ])
        backend.add("GET", "/teams/team-1/members", 200, {
            "members": [{"userId": "user-2", "displayName": "Ada", "email": "ada@example.com"}],
        })

        text = text_of(await ticket_list.handle({}, session, api))

        assert text.startswith("## All Team Tickets (1)")
        assert "| `T-1` | Add login |" in text
        assert "| Ada |" in text
        assert "/forge:exec" in text

    @pytest.mark.asyncio
    async def test_member_lookup_failure_keeps_ids(self, api, backend, session):
        backend.add("GET", "/tickets", 200, [
            {"id": "T-1", "title": "Add login", "status": "READY", "assignedTo": "user-2"},
        ])
        backend.add("GET", "/teams/team-1/members", 403)

        text = text_of(await ticket_list.handle({}, session, api))

        assert "| user-2 |" in text

    @pytest.mark.asyncio
    async def test_empty_mine(self, api, backend, session):
        backend.add("GET", "/tickets", 200, [])

        text = text_of(await ticket_list.handle({"filter": "mine"}, session, api))

        assert text.startswith("No tickets found.")
        assert "filter `all`" in text

    @pytest.mark.asyncio
    async def test_blank_filter_lists_team(self, api, backend, session):
        backend.add("GET", "/tickets", 200, [])

        text = text_of(await ticket_list.handle({"filter": ""}, session, api))

        assert text == "No tickets found."
        assert backend.requests[0].url.params["all"] == "true"

    @pytest.mark.asyncio
    async def test_fetch_failure(self, api, backend, session):
        backend.add("GET", "/tickets", 403)

        text = text_of(await ticket_list.handle({}, session, api))

        assert text.startswith("Error: Failed to fetch tickets:")
