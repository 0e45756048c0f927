import logging

from tracker_mcp.application.ports.tracker_port import TrackerPort
from tracker_mcp.application.services.markdown_renderer import render_issue_links, render_link_created
from tracker_mcp.domain.output import ToolOutput
from tracker_mcp.domain.tracker import IssueLink, parse_list

logger = logging.getLogger(__name__)


class GetIssueLinksUseCase:
    """이슈 링크(의존, 하위 작업, 중복 등)를 조회하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str) -> ToolOutput:
        logger.info("🔗 GetIssueLinksUseCase 실행: key=%s", key)

        data = await self.tracker_port.get_issue_links(key)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_issue_links(parse_list(data, IssueLink.from_api)),
        )


class LinkIssuesUseCase:
    """두 이슈를 연결하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str, relationship: str, issue: str) -> ToolOutput:
        logger.info("🔗 LinkIssuesUseCase 실행: %s --[%s]--> %s", key, relationship, issue)

        data = await self.tracker_port.link_issues(key, relationship, issue)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_link_created(key, relationship, issue),
        )
