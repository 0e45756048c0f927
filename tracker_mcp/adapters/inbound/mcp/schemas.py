"""MCP Tool 인자 모델. inputSchema는 각 모델의 JSON Schema로 생성됩니다."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tracker_mcp.domain.output import ResponseFormat

_ISSUE_KEY_DESCRIPTION = "Issue key (e.g., MYQUEUE-123)"


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' for human-readable or 'json' for structured data",
    )


class IssueKeyArguments(ToolArguments):
    issue_key: str = Field(min_length=1, description=_ISSUE_KEY_DESCRIPTION)


class GetIssueArguments(IssueKeyArguments):
    pass


class CreateIssueArguments(ToolArguments):
    queue: str = Field(min_length=1, description="Queue key (e.g., PROJ)")
    summary: str = Field(min_length=1, max_length=255, description="Issue title")
    description: str | None = Field(default=None, description="Issue description (plain text or wiki markup)")
    type: str | None = Field(default=None, description="Issue type key (e.g., 'task', 'bug', 'story', 'epic')")
    priority: str | None = Field(
        default=None, description="Priority key (e.g., 'trivial', 'minor', 'normal', 'critical', 'blocker')",
    )
    assignee: str | None = Field(default=None, description="Assignee login")
    parent: str | None = Field(default=None, description="Parent issue key (e.g., PROJ-100)")
    followers: list[str] | None = Field(default=None, description="Follower logins")
    tags: list[str] | None = Field(default=None, description="Tags")
    sprint: str | None = Field(default=None, description="Sprint ID")


class UpdateIssueArguments(IssueKeyArguments):
    summary: str | None = Field(default=None, description="Issue summary/title")
    description: str | None = Field(default=None, description="Issue description")
    status: str | None = Field(default=None, description="Status key (e.g., 'open', 'inProgress', 'closed')")
    assignee: str | None = Field(default=None, description="Assignee login")
    original_estimation: str | None = Field(
        default=None,
        alias="originalEstimation",
        description="Original estimate in ISO 8601 (e.g., 'PT8H', 'P1D', 'P1W')",
    )
    estimation: str | None = Field(default=None, description="Remaining estimate in ISO 8601 (e.g., 'PT4H', 'P2D')")
    spent: str | None = Field(default=None, description="Time spent in ISO 8601 (e.g., 'PT2H')")
    priority: str | None = Field(default=None, description="Priority key (e.g., 'minor', 'normal', 'critical')")
    type: str | None = Field(default=None, description="Issue type key (e.g., 'task', 'bug', 'improvement')")

    def updates(self) -> dict[str, Any]:
        """API 필드명(camelCase) 기준 수정 필드. 지정하지 않은 필드는 제외됩니다."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={"issue_key", "response_format"},
        )


class SearchIssuesArguments(ToolArguments):
    query: str | None = Field(
        default=None, description="Query in Yandex Tracker language (e.g., 'Queue: PROJ AND Status: open')",
    )
    filter: dict[str, Any] | None = Field(default=None, description="Filter object (alternative to query)")
    order: list[str] | None = Field(default=None, description="Sort order (e.g., ['-updated', '+priority'])")
    limit: int = Field(default=20, ge=1, le=100, description="Max results (1-100, default: 20)")
    offset: int = Field(default=0, ge=0, description="Pagination offset (default: 0)")


class AddWorklogArguments(IssueKeyArguments):
    duration: str = Field(description="Duration in ISO 8601 (e.g., 'PT2H', 'PT30M', 'P1D')")
    start: str | None = Field(default=None, description="Start time in ISO 8601 (default: now)")
    comment: str | None = Field(default=None, description="Work description")


class GetWorklogsArguments(IssueKeyArguments):
    pass


class GetCommentsArguments(IssueKeyArguments):
    expand: str | None = Field(default=None, description="Extra fields (e.g., 'attachments,reactions')")


class AddCommentArguments(IssueKeyArguments):
    text: str = Field(min_length=1, description="Comment text")
    summonees: list[str] | None = Field(default=None, description="Logins to mention/summon")


class GetTransitionsArguments(IssueKeyArguments):
    pass


class TransitionIssueArguments(IssueKeyArguments):
    transition_id: str = Field(min_length=1, description="Transition ID from get_transitions")
    comment: str | None = Field(default=None, description="Comment for the transition")


class GetIssueLinksArguments(IssueKeyArguments):
    pass


class LinkIssuesArguments(IssueKeyArguments):
    issue_key: str = Field(min_length=1, description="Source issue key (e.g., MYQUEUE-123)")
    relationship: str = Field(
        min_length=1,
        description=(
            "Link type: 'relates', 'depends on', 'is dependent by', 'is subtask for', "
            "'is parent task for', 'duplicates', 'is duplicated by'"
        ),
    )
    issue: str = Field(min_length=1, description="Target issue key (e.g., MYQUEUE-456)")
