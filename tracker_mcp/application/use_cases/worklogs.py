import logging

from tracker_mcp.application.ports.tracker_port import TrackerPort
from tracker_mcp.application.services.markdown_renderer import render_worklog_added, render_worklogs
from tracker_mcp.domain.output import ToolOutput
from tracker_mcp.domain.tracker import Worklog, parse_list

logger = logging.getLogger(__name__)


class AddWorklogUseCase:
    """이슈에 작업 시간을 기록하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(
        self, key: str, duration: str, start: str | None = None, comment: str | None = None,
    ) -> ToolOutput:
        """
        작업 시간을 기록합니다.

        Args:
            key: 이슈 키 (예: PROJ-123)
            duration: ISO 8601 기간 (예: 'PT2H30M'). 형식 검증은 Tracker에서 수행
            start: 시작 시각 (ISO 8601). None이면 Tracker가 현재 시각 사용
            comment: 작업 내용
        """
        logger.info("⏱️ AddWorklogUseCase 실행: key=%s, duration=%s", key, duration)

        data = await self.tracker_port.add_worklog(key, duration, start=start, comment=comment)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_worklog_added(key, Worklog.from_api(data)),
        )


class GetWorklogsUseCase:
    """이슈의 작업 시간 기록을 조회하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str) -> ToolOutput:
        logger.info("GetWorklogsUseCase 실행: key=%s", key)

        data = await self.tracker_port.get_worklogs(key)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_worklogs(parse_list(data, Worklog.from_api)),
        )
