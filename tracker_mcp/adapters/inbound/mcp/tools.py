import logging
import sys
import traceback
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from mcp.server import Server
from mcp.types import TextContent, Tool, ToolAnnotations
from pydantic import ValidationError

from tracker_mcp.adapters.inbound.mcp.schemas import (
    AddCommentArguments,
    AddWorklogArguments,
    CreateIssueArguments,
    GetCommentsArguments,
    GetIssueArguments,
    GetIssueLinksArguments,
    GetTransitionsArguments,
    GetWorklogsArguments,
    LinkIssuesArguments,
    SearchIssuesArguments,
    ToolArguments,
    TransitionIssueArguments,
    UpdateIssueArguments,
)
from tracker_mcp.configuration.container import Container, build_container
from tracker_mcp.domain.output import ToolOutput

logger = logging.getLogger(__name__)

# 로그에서 축약할 긴 텍스트 필드
_SENSITIVE_FIELDS = {"text", "description", "comment"}
_MASK_PREVIEW_CHARS = 20


class ToolCallError(Exception):
    """MCP 서버가 isError 응답으로 변환하도록 던지는 예외"""


@dataclass(frozen=True)
class ToolResponse:
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ToolSpec:
    """Tool 이름 + 인자 모델 + 핸들러"""
    name: str
    title: str
    description: str
    arguments: type[ToolArguments]
    handler: Callable[[Container, Any], Awaitable[ToolOutput]]
    read_only: bool
    idempotent: bool

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.arguments.model_json_schema(),
            annotations=ToolAnnotations(
                title=self.title,
                readOnlyHint=self.read_only,
                destructiveHint=False,
                idempotentHint=self.idempotent,
                openWorldHint=True,
            ),
        )


# ----------------------------------------------------------------------
# Handlers (검증된 인자 → Use Case)
# ----------------------------------------------------------------------

async def _get_issue(container: Container, args: GetIssueArguments) -> ToolOutput:
    return await container.get_issue_use_case.execute(key=args.issue_key)


async def _create_issue(container: Container, args: CreateIssueArguments) -> ToolOutput:
    return await container.create_issue_use_case.execute(
        args.queue,
        args.summary,
        description=args.description,
        issue_type=args.type,
        priority=args.priority,
        assignee=args.assignee,
        parent=args.parent,
        followers=args.followers,
        tags=args.tags,
        sprint=args.sprint,
    )


async def _update_issue(container: Container, args: UpdateIssueArguments) -> ToolOutput:
    return await container.update_issue_use_case.execute(key=args.issue_key, updates=args.updates())


async def _search_issues(container: Container, args: SearchIssuesArguments) -> ToolOutput:
    return await container.search_issues_use_case.execute(
        query=args.query,
        filter=args.filter,
        order=args.order,
        limit=args.limit,
        offset=args.offset,
    )


async def _add_worklog(container: Container, args: AddWorklogArguments) -> ToolOutput:
    return await container.add_worklog_use_case.execute(
        key=args.issue_key,
        duration=args.duration,
        start=args.start,
        comment=args.comment,
    )


async def _get_worklogs(container: Container, args: GetWorklogsArguments) -> ToolOutput:
    return await container.get_worklogs_use_case.execute(key=args.issue_key)


async def _get_comments(container: Container, args: GetCommentsArguments) -> ToolOutput:
    return await container.get_comments_use_case.execute(key=args.issue_key, expand=args.expand)


async def _add_comment(container: Container, args: AddCommentArguments) -> ToolOutput:
    return await container.add_comment_use_case.execute(
        key=args.issue_key, text=args.text, summonees=args.summonees,
    )


async def _get_transitions(container: Container, args: GetTransitionsArguments) -> ToolOutput:
    return await container.get_transitions_use_case.execute(key=args.issue_key)


async def _transition_issue(container: Container, args: TransitionIssueArguments) -> ToolOutput:
    return await container.transition_issue_use_case.execute(
        key=args.issue_key, transition_id=args.transition_id, comment=args.comment,
    )


async def _get_issue_links(container: Container, args: GetIssueLinksArguments) -> ToolOutput:
    return await container.get_issue_links_use_case.execute(key=args.issue_key)


async def _link_issues(container: Container, args: LinkIssuesArguments) -> ToolOutput:
    return await container.link_issues_use_case.execute(
        key=args.issue_key, relationship=args.relationship, issue=args.issue,
    )


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="yandex_tracker_get_issue",
        title="Get Yandex Tracker Issue",
        description="""Get detailed information about a specific issue by its key.

Returns issue data: key, summary, status, type, priority, assignee, dates, estimates, description.

Examples:
  - "Show me issue PROJ-456" -> issue_key="PROJ-456"
  - "Get PROJ-123 in JSON" -> issue_key="PROJ-123", response_format="json"

Error Handling:
  - 404: Issue key not found. Check the format QUEUE-NUMBER.
  - 403: No access to this issue or queue.""",
        arguments=GetIssueArguments,
        handler=_get_issue,
        read_only=True,
        idempotent=True,
    ),
    ToolSpec(
        name="yandex_tracker_create_issue",
        title="Create Yandex Tracker Issue",
        description="""Create a new issue in a queue.

Examples:
  - "Create a bug in PROJ queue" -> queue="PROJ", summary="...", type="bug"
  - "Create subtask for PROJ-100" -> queue="PROJ", summary="...", parent="PROJ-100"

Error Handling:
  - 400: Invalid queue or missing required fields.
  - 403: No permission to create issues in this queue.""",
        arguments=CreateIssueArguments,
        handler=_create_issue,
        read_only=False,
        idempotent=False,
    ),
    ToolSpec(
        name="yandex_tracker_update_issue",
        title="Update Yandex Tracker Issue",
        description="""Update fields of an existing issue. Only specified fields are changed.

Time fields (originalEstimation, estimation, spent) use ISO 8601 durations, e.g. 'PT8H', 'P1D', 'P1W'.

Examples:
  - "Set estimate for PROJ-456 to 16 hours" -> issue_key="PROJ-456", originalEstimation="PT16H"
  - "Assign PROJ-123 to john" -> issue_key="PROJ-123", assignee="john"

Error Handling:
  - 404: Issue not found.
  - 403: No permission to edit this issue.
  - 400: Invalid field value.""",
        arguments=UpdateIssueArguments,
        handler=_update_issue,
        read_only=False,
        idempotent=False,
    ),
    ToolSpec(
        name="yandex_tracker_search_issues",
        title="Search Yandex Tracker Issues",
        description="""Search for issues using Yandex Tracker query language or filter objects.

Returns:
  For JSON: { issues: [...], total, count, offset, has_more, next_offset }
  For Markdown: list with key, summary, status, priority, assignee.

Examples:
  - "Find open bugs in PROJ" -> query="Queue: PROJ AND Type: bug AND Status: open"
  - "Page 2 of results" -> offset=20, limit=20

Error Handling:
  - 400: Invalid query syntax.""",
        arguments=SearchIssuesArguments,
        handler=_search_issues,
        read_only=True,
        idempotent=True,
    ),
    ToolSpec(
        name="yandex_tracker_add_worklog",
        title="Add Worklog to Issue",
        description="""Add a time tracking record (worklog) to an issue.

Duration is ISO 8601: "PT2H" (2 hours), "PT30M" (30 min), "P1D" (1 business day = 8h).

Examples:
  - "Log 3 hours on PROJ-123" -> issue_key="PROJ-123", duration="PT3H"

Error Handling:
  - 404: Issue not found.
  - 400: Invalid duration format.""",
        arguments=AddWorklogArguments,
        handler=_add_worklog,
        read_only=False,
        idempotent=False,
    ),
    ToolSpec(
        name="yandex_tracker_get_worklogs",
        title="Get Issue Worklogs",
        description="""Get all time tracking records (worklogs) for an issue: duration, start time, author and comment.""",
        arguments=GetWorklogsArguments,
        handler=_get_worklogs,
        read_only=True,
        idempotent=True,
    ),
    ToolSpec(
        name="yandex_tracker_get_comments",
        title="Get Issue Comments",
        description="""Get all comments for an issue with author, text, creation date and edit timestamps.

Examples:
  - "Get comments with attachments" -> issue_key="PROJ-123", expand="attachments"
""",
        arguments=GetCommentsArguments,
        handler=_get_comments,
        read_only=True,
        idempotent=True,
    ),
    ToolSpec(
        name="yandex_tracker_add_comment",
        title="Add Comment to Issue",
        description="""Add a comment to an issue, optionally summoning users (they receive a notification).

Examples:
  - "Mention john on PROJ-456" -> issue_key="PROJ-456", text="Please review", summonees=["john"]""",
        arguments=AddCommentArguments,
        handler=_add_comment,
        read_only=False,
        idempotent=False,
    ),
    ToolSpec(
        name="yandex_tracker_get_transitions",
        title="Get Issue Transitions",
        description="""Get available status transitions for an issue. ALWAYS call this before transition_issue to discover valid transition IDs.""",
        arguments=GetTransitionsArguments,
        handler=_get_transitions,
        read_only=True,
        idempotent=True,
    ),
    ToolSpec(
        name="yandex_tracker_transition_issue",
        title="Execute Issue Transition",
        description="""Execute a status transition on an issue. First call get_transitions to find valid transition IDs.

Returns the transitions available after the change, not the issue itself; call get_issue to see the new state.

Error Handling:
  - 404: Issue or transition not found.
  - 400: Transition not available from current status.""",
        arguments=TransitionIssueArguments,
        handler=_transition_issue,
        read_only=False,
        idempotent=False,
    ),
    ToolSpec(
        name="yandex_tracker_get_issue_links",
        title="Get Issue Links",
        description="""Get all links for an issue: dependencies, subtasks, duplicates and related issues.""",
        arguments=GetIssueLinksArguments,
        handler=_get_issue_links,
        read_only=True,
        idempotent=True,
    ),
    ToolSpec(
        name="yandex_tracker_link_issues",
        title="Link Two Issues",
        description="""Create a link between two issues.

Examples:
  - "PROJ-123 depends on PROJ-100" -> issue_key="PROJ-123", relationship="depends on", issue="PROJ-100"
""",
        arguments=LinkIssuesArguments,
        handler=_link_issues,
        read_only=False,
        idempotent=True,
    ),
)

TOOLS: dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}


def _mask_arguments(arguments: dict) -> dict:
    """로깅용으로 긴 텍스트 필드를 축약합니다."""
    masked = {}
    for key, value in arguments.items():
        if key in _SENSITIVE_FIELDS and isinstance(value, str) and len(value) > _MASK_PREVIEW_CHARS:
            masked[key] = f"{value[:_MASK_PREVIEW_CHARS]}... ({len(value)}자)"
        else:
            masked[key] = value
    return masked


async def execute_tool(container: Container, name: str, arguments: dict | None) -> ToolResponse:
    """
    Tool 호출 하나를 실행합니다.

    인자 검증 → Use Case 실행 → response_format에 따른 렌더링.
    실패는 예외 대신 "Error: ..." 텍스트로 반환합니다.
    """
    arguments = arguments or {}
    logger.info("=" * 60)
    logger.info("🔧 Tool 호출: %s", name)
    logger.info("인자: %s", _mask_arguments(arguments))
    logger.info("=" * 60)

    try:
        spec = TOOLS.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")

        args = spec.arguments.model_validate(arguments)
        output = await spec.handler(container, args)
        text = output.render(args.response_format)

    except ValidationError as e:
        logger.error("❌ 인자 검증 실패: %s", name)
        return ToolResponse(text=f"Error: Invalid arguments for {name}: {e}", is_error=True)

    except Exception as e:
        logger.error("=" * 60)
        logger.error("❌ Tool 실행 실패!")
        logger.error("Tool: %s", name)
        logger.error("오류 타입: %s", type(e).__name__)
        logger.error("오류 메시지: %s", str(e))
        logger.error("=" * 60)
        traceback.print_exc(file=sys.stderr)
        return ToolResponse(text=f"Error: {e}", is_error=True)

    logger.info("✅ Tool 실행 완료: %s (%d자)", name, len(text))
    return ToolResponse(text=text)


def register_tools(app: Server) -> None:
    """MCP Tool 핸들러를 서버에 등록합니다."""

    @app.call_tool()
    async def call_tool(name: str, arguments: dict):
        container = build_container()
        response = await execute_tool(container, name, arguments)
        if response.is_error:
            # low-level Server가 예외를 isError=True 결과로 변환
            raise ToolCallError(response.text)
        return [TextContent(type="text", text=response.text)]

    @app.list_tools()
    async def list_tools():
        return [spec.to_tool() for spec in TOOL_SPECS]
