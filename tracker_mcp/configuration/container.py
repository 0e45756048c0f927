from dataclasses import dataclass
from functools import lru_cache

from tracker_mcp.adapters.outbound.tracker_adapter import TrackerAdapter
from tracker_mcp.application.ports.tracker_port import TrackerPort
from tracker_mcp.application.use_cases.comments import AddCommentUseCase, GetCommentsUseCase
from tracker_mcp.application.use_cases.issues import (
    CreateIssueUseCase,
    GetIssueUseCase,
    SearchIssuesUseCase,
    UpdateIssueUseCase,
)
from tracker_mcp.application.use_cases.links import GetIssueLinksUseCase, LinkIssuesUseCase
from tracker_mcp.application.use_cases.transitions import GetTransitionsUseCase, TransitionIssueUseCase
from tracker_mcp.application.use_cases.worklogs import AddWorklogUseCase, GetWorklogsUseCase
from tracker_mcp.configuration.settings import Settings, build_settings


@dataclass(frozen=True)
class Container:
    settings: Settings
    get_issue_use_case: GetIssueUseCase
    create_issue_use_case: CreateIssueUseCase
    update_issue_use_case: UpdateIssueUseCase
    search_issues_use_case: SearchIssuesUseCase
    add_worklog_use_case: AddWorklogUseCase
    get_worklogs_use_case: GetWorklogsUseCase
    get_comments_use_case: GetCommentsUseCase
    add_comment_use_case: AddCommentUseCase
    get_transitions_use_case: GetTransitionsUseCase
    transition_issue_use_case: TransitionIssueUseCase
    get_issue_links_use_case: GetIssueLinksUseCase
    link_issues_use_case: LinkIssuesUseCase


def wire_container(settings: Settings, tracker_port: TrackerPort) -> Container:
    """Port 하나로 모든 Use Case를 구성합니다."""
    return Container(
        settings=settings,
        get_issue_use_case=GetIssueUseCase(tracker_port=tracker_port),
        create_issue_use_case=CreateIssueUseCase(tracker_port=tracker_port),
        update_issue_use_case=UpdateIssueUseCase(tracker_port=tracker_port),
        search_issues_use_case=SearchIssuesUseCase(tracker_port=tracker_port),
        add_worklog_use_case=AddWorklogUseCase(tracker_port=tracker_port),
        get_worklogs_use_case=GetWorklogsUseCase(tracker_port=tracker_port),
        get_comments_use_case=GetCommentsUseCase(tracker_port=tracker_port),
        add_comment_use_case=AddCommentUseCase(tracker_port=tracker_port),
        get_transitions_use_case=GetTransitionsUseCase(tracker_port=tracker_port),
        transition_issue_use_case=TransitionIssueUseCase(tracker_port=tracker_port),
        get_issue_links_use_case=GetIssueLinksUseCase(tracker_port=tracker_port),
        link_issues_use_case=LinkIssuesUseCase(tracker_port=tracker_port),
    )


@lru_cache(maxsize=1)
def build_container() -> Container:
    settings = build_settings()

    tracker_adapter = TrackerAdapter(
        token=settings.tracker_token,
        iam_token=settings.tracker_iam_token,
        org_id=settings.tracker_org_id,
        cloud_org_id=settings.tracker_cloud_org_id,
    )

    return wire_container(settings, tracker_adapter)


def clear_container() -> None:
    build_container.cache_clear()
