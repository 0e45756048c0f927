import logging

from tracker_mcp.application.ports.tracker_port import TrackerPort
from tracker_mcp.application.services.markdown_renderer import render_comment_added, render_comments
from tracker_mcp.domain.output import ToolOutput
from tracker_mcp.domain.tracker import Comment, parse_list

logger = logging.getLogger(__name__)


class GetCommentsUseCase:
    """이슈 댓글을 조회하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str, expand: str | None = None) -> ToolOutput:
        logger.info("💬 GetCommentsUseCase 실행: key=%s, expand=%s", key, expand)

        data = await self.tracker_port.get_comments(key, expand=expand)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_comments(parse_list(data, Comment.from_api)),
        )


class AddCommentUseCase:
    """이슈에 댓글을 추가하는 Use Case (summonees 지정 시 해당 사용자 호출)"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str, text: str, summonees: list[str] | None = None) -> ToolOutput:
        logger.info("💬 AddCommentUseCase 실행: key=%s, summonees=%s", key, summonees)

        data = await self.tracker_port.add_comment(key, text, summonees=summonees)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_comment_added(key, Comment.from_api(data)),
        )
