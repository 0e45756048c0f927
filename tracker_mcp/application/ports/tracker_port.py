from typing import Any, Protocol

from tracker_mcp.domain.tracker import SearchResult


class TrackerPort(Protocol):
    """Yandex Tracker 서비스와의 계약을 정의하는 Port"""

    async def get_issue(self, key: str) -> dict[str, Any]:
        """이슈 키로 이슈를 조회합니다."""
        ...

    async def create_issue(
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
    ) -> dict[str, Any]:
        """이슈를 생성합니다."""
        ...

    async def update_issue(self, key: str, updates: dict[str, Any]) -> dict[str, Any]:
        """이슈 필드를 수정합니다."""
        ...

    async def add_worklog(
        self, key: str, duration: str, start: str | None = None, comment: str | None = None,
    ) -> dict[str, Any]:
        """작업 시간을 기록합니다."""
        ...

    async def get_worklogs(self, key: str) -> list[dict[str, Any]]:
        """이슈의 작업 시간 기록을 조회합니다."""
        ...

    async def search_issues(
        self,
        query: str | None = None,
        filter: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> SearchResult:
        """쿼리 또는 필터로 이슈를 검색합니다."""
        ...

    async def get_comments(self, key: str, expand: str | None = None) -> list[dict[str, Any]]:
        """이슈 댓글 목록을 조회합니다."""
        ...

    async def add_comment(self, key: str, text: str, summonees: list[str] | None = None) -> dict[str, Any]:
        """이슈에 댓글을 추가합니다."""
        ...

    async def get_transitions(self, key: str) -> list[dict[str, Any]]:
        """이슈에서 가능한 상태 전환 목록을 조회합니다."""
        ...

    async def transition_issue(
        self, key: str, transition_id: str, comment: str | None = None,
    ) -> list[dict[str, Any]]:
        """상태 전환을 실행하고 전환 이후의 전환 목록을 반환합니다."""
        ...

    async def get_issue_links(self, key: str) -> list[dict[str, Any]]:
        """이슈 링크 목록을 조회합니다."""
        ...

    async def link_issues(self, key: str, relationship: str, issue: str) -> dict[str, Any]:
        """두 이슈를 연결합니다."""
        ...
