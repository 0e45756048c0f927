from dataclasses import dataclass, field
from typing import Any

_NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class DisplayField:
    """Tracker 공통 참조 필드 (코드 + 표시명)"""
    key: str | None = None
    display: str | None = None
    id: str | None = None

    @property
    def code(self) -> str | None:
        return self.key or self.id

    @classmethod
    def from_api(cls, data: Any) -> "DisplayField | None":
        if not isinstance(data, dict):
            return None
        return cls(
            key=data.get("key"),
            display=data.get("display"),
            id=_as_str(data.get("id")),
        )


@dataclass(frozen=True)
class UserRef:
    """사용자 참조"""
    display: str | None = None
    id: str | None = None
    login: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> "UserRef | None":
        if not isinstance(data, dict):
            return None
        return cls(
            display=data.get("display"),
            id=_as_str(data.get("id")),
            login=data.get("login"),
        )


def resolve_label(ref: DisplayField | None, default: str = _NOT_AVAILABLE) -> str:
    """표시명 → 코드 → default 순으로 라벨을 결정합니다."""
    if ref is None:
        return default
    return ref.display or ref.code or default


def display_name(user: UserRef | None, default: str) -> str:
    if user is None or not user.display:
        return default
    return user.display


@dataclass(frozen=True)
class Issue:
    """Tracker 이슈 엔티티"""
    key: str
    summary: str
    status: DisplayField | None = None
    issue_type: DisplayField | None = None
    priority: DisplayField | None = None
    assignee: UserRef | None = None
    created_at: str | None = None
    updated_at: str | None = None
    original_estimation: str | None = None   # ISO 8601 duration (예: PT8H)
    estimation: str | None = None
    spent: str | None = None
    description: str | None = None
    queue: DisplayField | None = None
    parent_key: str | None = None
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Any) -> "Issue":
        data = data if isinstance(data, dict) else {}
        parent = data.get("parent")
        return cls(
            key=data.get("key", ""),
            summary=data.get("summary", ""),
            status=DisplayField.from_api(data.get("status")),
            issue_type=DisplayField.from_api(data.get("type")),
            priority=DisplayField.from_api(data.get("priority")),
            assignee=UserRef.from_api(data.get("assignee")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            original_estimation=data.get("originalEstimation"),
            estimation=data.get("estimation"),
            spent=data.get("spent"),
            description=data.get("description"),
            queue=DisplayField.from_api(data.get("queue")),
            parent_key=parent.get("key") if isinstance(parent, dict) else None,
            tags=list(data.get("tags") or []),
        )


@dataclass(frozen=True)
class Worklog:
    """작업 시간 기록"""
    duration: str | None
    start: str | None
    created_at: str | None
    created_by: UserRef | None = None
    comment: str | None = None
    id: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> "Worklog":
        data = data if isinstance(data, dict) else {}
        return cls(
            duration=data.get("duration"),
            start=data.get("start"),
            created_at=data.get("createdAt"),
            created_by=UserRef.from_api(data.get("createdBy")),
            comment=data.get("comment"),
            id=_as_str(data.get("id")),
        )


@dataclass(frozen=True)
class Comment:
    """이슈 댓글"""
    text: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    created_by: UserRef | None = None
    id: str | None = None

    @property
    def edited(self) -> bool:
        # 수정 전에는 updatedAt == createdAt
        return bool(self.updated_at) and self.updated_at != self.created_at

    @classmethod
    def from_api(cls, data: Any) -> "Comment":
        data = data if isinstance(data, dict) else {}
        return cls(
            text=data.get("text"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            created_by=UserRef.from_api(data.get("createdBy")),
            id=_as_str(data.get("id")),
        )


@dataclass(frozen=True)
class Transition:
    """상태 전환 (id는 해당 이슈에서만 유효한 operation 토큰)"""
    id: str | None
    display: str | None = None
    to: DisplayField | None = None

    @classmethod
    def from_api(cls, data: Any) -> "Transition":
        data = data if isinstance(data, dict) else {}
        return cls(
            id=_as_str(data.get("id")),
            display=data.get("display"),
            to=DisplayField.from_api(data.get("to")),
        )


@dataclass(frozen=True)
class LinkedIssue:
    """링크 대상 이슈 요약"""
    key: str | None = None
    display: str | None = None
    summary: str | None = None
    status: DisplayField | None = None

    @property
    def title(self) -> str:
        return self.display or self.summary or ""

    @classmethod
    def from_api(cls, data: Any) -> "LinkedIssue":
        data = data if isinstance(data, dict) else {}
        return cls(
            key=data.get("key"),
            display=data.get("display"),
            summary=data.get("summary"),
            status=DisplayField.from_api(data.get("status")),
        )


@dataclass(frozen=True)
class IssueLink:
    """이슈 간 방향성 있는 관계"""
    link_type: DisplayField | None
    direction: str | None
    target: LinkedIssue

    @classmethod
    def from_api(cls, data: Any) -> "IssueLink":
        data = data if isinstance(data, dict) else {}
        return cls(
            link_type=DisplayField.from_api(data.get("type")),
            direction=data.get("direction"),
            target=LinkedIssue.from_api(data.get("object")),
        )


@dataclass(frozen=True)
class SearchResult:
    """
    검색 결과 한 페이지.

    Tracker API는 전체 건수를 반환하지 않으므로 total/count 모두 현재 페이지 크기입니다.
    """
    issues: list[dict[str, Any]]
    total: int
    count: int
    offset: int
    has_more: bool
    next_offset: int | None = None

    @classmethod
    def from_page(cls, issues: Any, offset: int, per_page: int) -> "SearchResult":
        page = issues if isinstance(issues, list) else []
        has_more = len(page) >= per_page
        return cls(
            issues=page,
            total=len(page),
            count=len(page),
            offset=offset,
            has_more=has_more,
            next_offset=offset + len(page) if has_more else None,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "issues": self.issues,
            "total": self.total,
            "count": self.count,
            "offset": self.offset,
            "has_more": self.has_more,
        }
        if self.next_offset is not None:
            result["next_offset"] = self.next_offset
        return result


def parse_list(data: Any, parser) -> list:
    """리스트 응답을 엔티티 목록으로 변환합니다. 204(None) 등 비리스트 응답은 빈 목록."""
    if not isinstance(data, list):
        return []
    return [parser(item) for item in data]


def _as_str(value: Any) -> str | None:
    return None if value is None else str(value)
