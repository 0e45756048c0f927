"""
Tracker 응답 → Markdown 렌더러.

모든 출력은 CHARACTER_LIMIT 하나로 길이가 제한됩니다. 필드 값은 평문 그대로 삽입하며
markdown 이스케이프는 하지 않습니다.
"""
import logging
from typing import Any

from jinja2 import DictLoader, Environment, Undefined

from tracker_mcp.domain.tracker import (
    Comment,
    Issue,
    IssueLink,
    SearchResult,
    Transition,
    Worklog,
    display_name,
    resolve_label,
)

logger = logging.getLogger(__name__)

CHARACTER_LIMIT = 25_000
TRUNCATION_NOTICE = "\n\n---\n*Response truncated. Use filters or pagination to narrow results.*"

NO_ISSUES = "No issues found."
NO_WORKLOGS = "No worklog entries found."
NO_COMMENTS = "No comments found."
NO_TRANSITIONS = "No available transitions."
NO_LINKS = "No issue links found."

_TEMPLATES = {
    "issue": """\
# {{ issue.key }}: {{ issue.summary }}

**Status:** {{ issue.status | label }}
**Type:** {{ issue.issue_type | label }}
**Priority:** {{ issue.priority | label }}
**Assignee:** {{ issue.assignee | user("Unassigned") }}
**Created:** {{ issue.created_at or "N/A" }}
**Updated:** {{ issue.updated_at or "N/A" }}

{% if issue.original_estimation %}
**Original Estimate:** {{ issue.original_estimation }}
{% endif %}
{% if issue.estimation %}
**Remaining Estimate:** {{ issue.estimation }}
{% endif %}
{% if issue.spent %}
**Time Spent:** {{ issue.spent }}
{% endif %}
{% if issue.description %}

## Description

{{ issue.description }}
{% endif %}
""",
    "search": """\
# Search Results

Found {{ result.count }} issues (offset {{ result.offset }}){{ ", more available" if result.has_more else "" }}

{% for issue in issues %}
## {{ issue.key }}: {{ issue.summary }}
**Status:** {{ issue.status | label }} | **Priority:** {{ issue.priority | label }} | **Assignee:** {{ issue.assignee | user("Unassigned") }}
**Updated:** {{ issue.updated_at or "N/A" }}

{% endfor %}
{% if result.has_more and result.next_offset is not none %}
---
*Use offset={{ result.next_offset }} to see more results*
{% endif %}
""",
    "worklogs": """\
# Worklog Entries ({{ worklogs | length }})

{% for log in worklogs %}
## {{ log.created_by | user("Unknown") }}
**Duration:** {{ log.duration or "N/A" }}
**Start:** {{ log.start or "N/A" }}
**Created:** {{ log.created_at or "N/A" }}
{% if log.comment %}
**Comment:** {{ log.comment }}
{% endif %}

{% endfor %}
""",
    "comments": """\
# Comments ({{ comments | length }})

{% for comment in comments %}
## {{ comment.created_by | user("Unknown") }} ({{ comment.created_at or "N/A" }})

{{ comment.text or "" }}

{% if comment.edited %}
*Edited: {{ comment.updated_at }}*

{% endif %}
---

{% endfor %}
""",
    "transitions": """\
# Available Transitions ({{ transitions | length }})

| ID | Display Name | Target Status |
|----|--------------|---------------|
{% for t in transitions %}
| {{ t.id or "N/A" }} | {{ t.display or t.id or "N/A" }} | {{ t.to | label }} |
{% endfor %}

Use the ID value as `transition_id` in yandex_tracker_transition_issue to execute a transition.
""",
    "links": """\
# Issue Links ({{ links | length }})

{% for link in links %}
- **{{ link.link_type | label("Unknown") }}** {{ link.direction or "" }}: **{{ link.target.key or "N/A" }}** {{ link.target.title }}{{ " (" ~ link.target.status.display ~ ")" if link.target.status and link.target.status.display else "" }}
{% endfor %}
""",
}


class LoggingUndefined(Undefined):
    """미치환 변수 접근 시 경고 로그를 출력합니다."""
    def __str__(self) -> str:
        logger.warning("템플릿 미치환 변수: %s", self._undefined_name)
        return ""


def _build_environment() -> Environment:
    env = Environment(
        loader=DictLoader(_TEMPLATES),
        undefined=LoggingUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["label"] = resolve_label
    env.filters["user"] = display_name
    return env


_env = _build_environment()


def truncate(text: str) -> str:
    """CHARACTER_LIMIT를 넘으면 정확히 그 길이로 자르고 안내 문구를 붙입니다."""
    if len(text) <= CHARACTER_LIMIT:
        return text
    return text[:CHARACTER_LIMIT] + TRUNCATION_NOTICE


def _render(template_name: str, **context: Any) -> str:
    return _env.get_template(template_name).render(**context)


# ----------------------------------------------------------------------
# 조회 결과
# ----------------------------------------------------------------------

def render_issue(issue: Issue) -> str:
    return truncate(_render("issue", issue=issue))


def render_search_results(result: SearchResult) -> str:
    if not result.issues:
        return NO_ISSUES
    issues = [Issue.from_api(item) for item in result.issues]
    return truncate(_render("search", result=result, issues=issues))


def render_worklogs(worklogs: list[Worklog]) -> str:
    if not worklogs:
        return NO_WORKLOGS
    return truncate(_render("worklogs", worklogs=worklogs))


def render_comments(comments: list[Comment]) -> str:
    if not comments:
        return NO_COMMENTS
    return truncate(_render("comments", comments=comments))


def render_transitions(transitions: list[Transition]) -> str:
    if not transitions:
        return NO_TRANSITIONS
    return truncate(_render("transitions", transitions=transitions))


def render_issue_links(links: list[IssueLink]) -> str:
    if not links:
        return NO_LINKS
    return truncate(_render("links", links=links))


# ----------------------------------------------------------------------
# 변경 작업 확인 메시지
# ----------------------------------------------------------------------

def render_issue_created(issue: Issue) -> str:
    return truncate(f"Issue {issue.key} created successfully\n\n" + _render("issue", issue=issue))


def render_issue_updated(key: str, issue: Issue) -> str:
    return truncate(f"Issue {key} updated successfully\n\n" + _render("issue", issue=issue))


def render_worklog_added(key: str, worklog: Worklog) -> str:
    text = f"Worklog added to {key}\n\n"
    text += f"Duration: {worklog.duration or 'N/A'}\n"
    text += f"Start: {worklog.start or 'N/A'}"
    if worklog.comment:
        text += f"\nComment: {worklog.comment}"
    return truncate(text)


def render_comment_added(key: str, comment: Comment) -> str:
    text = f"Comment added to {key}\n\n"
    text += f"By: {display_name(comment.created_by, 'Unknown')}\n"
    text += f"Text: {comment.text or ''}"
    return truncate(text)


def render_transition_executed(
    key: str, transition_id: str, comment: str | None, transitions: list[Transition],
) -> str:
    text = f"Transition '{transition_id}' executed on {key}"
    if comment:
        text += f"\nComment: {comment}"
    if transitions:
        text += "\n\n" + _render("transitions", transitions=transitions)
    return truncate(text)


def render_link_created(key: str, relationship: str, issue: str) -> str:
    return truncate(f"Link created: {key} --[{relationship}]--> {issue}")
