import logging
from typing import Any

from tracker_mcp.application.ports.tracker_port import TrackerPort
from tracker_mcp.application.services.markdown_renderer import (
    render_issue,
    render_issue_created,
    render_issue_updated,
    render_search_results,
)
from tracker_mcp.domain.output import ToolOutput
from tracker_mcp.domain.tracker import Issue

logger = logging.getLogger(__name__)


class GetIssueUseCase:
    """이슈 키로 이슈를 조회하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str) -> ToolOutput:
        logger.info("🔍 GetIssueUseCase 실행: key=%s", key)

        data = await self.tracker_port.get_issue(key)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_issue(Issue.from_api(data)),
        )


class CreateIssueUseCase:
    """큐에 새 이슈를 생성하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(
        self,
        queue: str,
        summary: str,
        *,
        description: str | None = None,
        issue_type: str | None = None,
        priority: str | None = None,
        assignee: str | None = None,
        parent: str | None = None,
        followers: list[str] | None = None,
        tags: list[str] | None = None,
        sprint: str | None = None,
    ) -> ToolOutput:
        """
        이슈를 생성합니다.

        Args:
            queue: 큐 키 (예: PROJ)
            summary: 이슈 제목
            issue_type, priority: Tracker 키 값 (예: 'bug', 'critical'). {"key": ...} 형태로 전송됨
            followers: 팔로워 로그인 목록
            sprint: 스프린트 ID

        Returns:
            생성된 이슈 (ToolOutput)
        """
        logger.info("CreateIssueUseCase 실행: queue=%s, summary=%s", queue, summary)

        data = await self.tracker_port.create_issue(
            queue,
            summary,
            description=description,
            issue_type=issue_type,
            priority=priority,
            assignee=assignee,
            parent=parent,
            followers=followers,
            tags=tags,
            sprint=sprint,
        )
        issue = Issue.from_api(data)
        logger.info("✅ 이슈 생성 완료: %s", issue.key)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_issue_created(issue),
        )


class UpdateIssueUseCase:
    """이슈 필드를 수정하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str, updates: dict[str, Any]) -> ToolOutput:
        """
        지정된 필드만 수정합니다. 값이 None인 필드는 전송하지 않습니다 (필드 비우기 아님).
        """
        logger.info("UpdateIssueUseCase 실행: key=%s, fields=%s", key, sorted(updates))

        data = await self.tracker_port.update_issue(key, updates)

        logger.info("✅ 이슈 수정 완료: %s", key)
        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_issue_updated(key, Issue.from_api(data)),
        )


class SearchIssuesUseCase:
    """쿼리/필터로 이슈를 검색하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(
        self,
        query: str | None = None,
        filter: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> ToolOutput:
        logger.info("📋 SearchIssuesUseCase 실행: query=%s, limit=%s, offset=%s", query, limit, offset)

        result = await self.tracker_port.search_issues(
            query=query,
            filter=filter,
            order=order,
            limit=limit,
            offset=offset,
        )

        logger.info("✅ Use Case 실행 완료: %d개 이슈", result.count)
        return ToolOutput(
            payload=result.to_dict(),
            render_markdown=lambda: render_search_results(result),
        )
