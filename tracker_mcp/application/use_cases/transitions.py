import logging

from tracker_mcp.application.ports.tracker_port import TrackerPort
from tracker_mcp.application.services.markdown_renderer import (
    render_transition_executed,
    render_transitions,
)
from tracker_mcp.domain.output import ToolOutput
from tracker_mcp.domain.tracker import Transition, parse_list

logger = logging.getLogger(__name__)


class GetTransitionsUseCase:
    """이슈에서 가능한 상태 전환 목록을 조회하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str) -> ToolOutput:
        logger.info("GetTransitionsUseCase 실행: key=%s", key)

        data = await self.tracker_port.get_transitions(key)

        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_transitions(parse_list(data, Transition.from_api)),
        )


class TransitionIssueUseCase:
    """이슈 상태를 전환하는 Use Case"""

    def __init__(self, tracker_port: TrackerPort):
        self.tracker_port = tracker_port

    async def execute(self, key: str, transition_id: str, comment: str | None = None) -> ToolOutput:
        """
        상태 전환을 실행합니다.

        Args:
            key: 이슈 키 (예: PROJ-123)
            transition_id: get_transitions로 조회한 전환 ID (예: 'start_progress')
            comment: 전환 시 남길 댓글

        Returns:
            전환 이후 가능한 transition 목록. 변경된 이슈 상태가 필요하면 get_issue를 별도로 호출해야 합니다.
        """
        logger.info("🔄 TransitionIssueUseCase 실행: key=%s, transition=%s", key, transition_id)

        data = await self.tracker_port.transition_issue(key, transition_id, comment=comment)

        logger.info("✅ 상태 전환 완료: %s (%s)", key, transition_id)
        return ToolOutput(
            payload=data,
            render_markdown=lambda: render_transition_executed(
                key, transition_id, comment, parse_list(data, Transition.from_api),
            ),
        )
