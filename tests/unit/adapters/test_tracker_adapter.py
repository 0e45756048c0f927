"""Unit tests for TrackerAdapter."""

import pytest

from tracker_mcp.adapters.outbound.tracker_adapter import TrackerAdapter, build_body
from tracker_mcp.domain.errors import ConfigurationError, TrackerRequestError


@pytest.mark.unit
class TestConstruction:
    """Credential and organization header selection."""

    def test_missing_credentials_raises(self) -> None:
        """Neither token nor IAM token is a configuration error."""
        with pytest.raises(ConfigurationError):
            TrackerAdapter(org_id="org-1")

    def test_empty_credentials_count_as_missing(self) -> None:
        """Empty strings are treated as absent."""
        with pytest.raises(ConfigurationError):
            TrackerAdapter(token="", iam_token="", org_id="org-1")

    def test_missing_org_raises(self) -> None:
        """Neither org id nor cloud org id is a configuration error."""
        with pytest.raises(ConfigurationError):
            TrackerAdapter(token="oauth-token")

    @pytest.mark.asyncio
    async def test_iam_token_takes_precedence(self, tracker_api) -> None:
        """IAM token selects the Bearer scheme even when an OAuth token is set."""
        adapter = tracker_api.adapter(token="oauth-token", iam_token="iam-token", org_id="org-1")

        await adapter.get_issue("Q-1")

        assert adapter.auth_scheme == "Bearer"
        assert tracker_api.last_request.headers["Authorization"] == "Bearer iam-token"

    @pytest.mark.asyncio
    async def test_oauth_token_header(self, tracker_api) -> None:
        """OAuth token is sent with the OAuth scheme."""
        adapter = tracker_api.adapter(token="oauth-token", org_id="org-1")

        await adapter.get_issue("Q-1")

        assert tracker_api.last_request.headers["Authorization"] == "OAuth oauth-token"

    @pytest.mark.asyncio
    async def test_cloud_org_takes_precedence(self, tracker_api) -> None:
        """Only the cloud org header is sent when both org ids are configured."""
        adapter = tracker_api.adapter(token="oauth-token", org_id="org-1", cloud_org_id="cloud-1")

        await adapter.get_issue("Q-1")

        headers = tracker_api.last_request.headers
        assert headers["X-Cloud-Org-Id"] == "cloud-1"
        assert "X-Org-Id" not in headers

    @pytest.mark.asyncio
    async def test_org_header_and_content_type(self, tracker_api) -> None:
        """Classic org id uses X-Org-Id; JSON content type is always set."""
        adapter = tracker_api.adapter(token="oauth-token", org_id="org-1")

        await adapter.get_issue("Q-1")

        headers = tracker_api.last_request.headers
        assert headers["X-Org-Id"] == "org-1"
        assert "X-Cloud-Org-Id" not in headers
        assert headers["Content-Type"] == "application/json"


@pytest.mark.unit
class TestBuildBody:
    """Declarative body construction."""

    def test_drops_none_and_applies_transforms(self) -> None:
        """None fields are omitted, transformed fields wrapped, others verbatim."""
        body = build_body(
            {"status": "closed", "summary": "New", "spent": None},
            {"status": lambda v: {"key": v}},
        )

        assert body == {"status": {"key": "closed"}, "summary": "New"}


@pytest.mark.unit
class TestIssues:
    """Issue endpoints."""

    @pytest.mark.asyncio
    async def test_get_issue(self, tracker_api) -> None:
        """GET /issues/{key} returns the decoded body unchanged."""
        tracker_api.respond(json={"key": "Q-1", "summary": "Test", "custom": {"x": 1}})
        adapter = tracker_api.adapter()

        issue = await adapter.get_issue("Q-1")

        assert issue == {"key": "Q-1", "summary": "Test", "custom": {"x": 1}}
        assert tracker_api.last_request.method == "GET"
        assert tracker_api.last_request.url.path == "/v2/issues/Q-1"

    @pytest.mark.asyncio
    async def test_create_issue_body(self, tracker_api) -> None:
        """type/priority wrapped as key refs, followers as add, sprint as a list."""
        tracker_api.respond(status_code=201, json={"key": "PROJ-1"})
        adapter = tracker_api.adapter()

        await adapter.create_issue(
            "PROJ",
            "Title",
            issue_type="bug",
            priority="critical",
            assignee="john",
            parent="PROJ-100",
            followers=["anna"],
            tags=["backend"],
            sprint="42",
        )

        assert tracker_api.last_request.method == "POST"
        assert tracker_api.last_request.url.path == "/v2/issues"
        assert tracker_api.last_body() == {
            "queue": "PROJ",
            "summary": "Title",
            "type": {"key": "bug"},
            "priority": {"key": "critical"},
            "assignee": "john",
            "parent": "PROJ-100",
            "followers": {"add": ["anna"]},
            "tags": ["backend"],
            "sprint": [{"id": "42"}],
        }

    @pytest.mark.asyncio
    async def test_create_issue_omits_absent_fields(self, tracker_api) -> None:
        """Optional fields that are not given never appear as null."""
        adapter = tracker_api.adapter()

        await adapter.create_issue("PROJ", "Title")

        assert tracker_api.last_body() == {"queue": "PROJ", "summary": "Title"}

    @pytest.mark.asyncio
    async def test_update_issue_body(self, tracker_api) -> None:
        """status/type/priority wrapped, other fields verbatim, None dropped."""
        adapter = tracker_api.adapter()
        updates = {
            "status": "closed",
            "type": "bug",
            "priority": "minor",
            "summary": "Renamed",
            "originalEstimation": "PT8H",
            "assignee": None,
        }

        await adapter.update_issue("Q-1", updates)
        first_body = tracker_api.last_body()
        await adapter.update_issue("Q-1", updates)

        assert tracker_api.last_request.method == "PATCH"
        assert tracker_api.last_request.url.path == "/v2/issues/Q-1"
        assert first_body == {
            "status": {"key": "closed"},
            "type": {"key": "bug"},
            "priority": {"key": "minor"},
            "summary": "Renamed",
            "originalEstimation": "PT8H",
        }
        assert tracker_api.last_body() == first_body


@pytest.mark.unit
class TestSearchIssues:
    """Search pagination and normalization."""

    @pytest.mark.asyncio
    async def test_page_derived_from_offset(self, tracker_api) -> None:
        """limit=20, offset=45 -> perPage=20, page=3."""
        tracker_api.respond(json=[])
        adapter = tracker_api.adapter()

        await adapter.search_issues(query="Queue: PROJ", limit=20, offset=45)

        params = tracker_api.last_request.url.params
        assert tracker_api.last_request.url.path == "/v2/issues/_search"
        assert params["perPage"] == "20"
        assert params["page"] == "3"
        assert tracker_api.last_body() == {"query": "Queue: PROJ"}

    @pytest.mark.asyncio
    async def test_defaults(self, tracker_api) -> None:
        """No limit/offset -> perPage=20, page=1, empty body."""
        tracker_api.respond(json=[])
        adapter = tracker_api.adapter()

        result = await adapter.search_issues()

        params = tracker_api.last_request.url.params
        assert params["perPage"] == "20"
        assert params["page"] == "1"
        assert tracker_api.last_body() == {}
        assert result.offset == 0

    @pytest.mark.asyncio
    async def test_full_page_has_more(self, tracker_api) -> None:
        """A full page sets has_more and next_offset."""
        tracker_api.respond(json=[{"key": f"Q-{i}"} for i in range(20)])
        adapter = tracker_api.adapter()

        result = await adapter.search_issues(limit=20, offset=0)

        assert result.count == 20
        assert result.total == 20
        assert result.has_more is True
        assert result.next_offset == 20

    @pytest.mark.asyncio
    async def test_partial_page(self, tracker_api) -> None:
        """A short page has no next_offset."""
        tracker_api.respond(json=[{"key": "Q-1"}, {"key": "Q-2"}])
        adapter = tracker_api.adapter()

        result = await adapter.search_issues(
            filter={"queue": "PROJ"}, order=["-updated"], limit=10, offset=10,
        )

        assert tracker_api.last_body() == {"filter": {"queue": "PROJ"}, "order": ["-updated"]}
        assert result.count == 2
        assert result.offset == 10
        assert result.has_more is False
        assert result.next_offset is None

    @pytest.mark.asyncio
    async def test_non_list_body_coerced_to_empty(self, tracker_api) -> None:
        """An object body yields an empty result instead of a type error."""
        tracker_api.respond(json={"unexpected": True})
        adapter = tracker_api.adapter()

        result = await adapter.search_issues()

        assert result.issues == []
        assert result.count == 0
        assert result.has_more is False


@pytest.mark.unit
class TestWorklogsCommentsTransitionsLinks:
    """Remaining endpoints."""

    @pytest.mark.asyncio
    async def test_add_worklog_only_duration(self, tracker_api) -> None:
        """start/comment are omitted when not given."""
        adapter = tracker_api.adapter()

        await adapter.add_worklog("Q-1", "PT2H")

        assert tracker_api.last_request.url.path == "/v2/issues/Q-1/worklog"
        assert tracker_api.last_body() == {"duration": "PT2H"}

    @pytest.mark.asyncio
    async def test_add_worklog_full(self, tracker_api) -> None:
        """All worklog fields are sent when present."""
        adapter = tracker_api.adapter()

        await adapter.add_worklog("Q-1", "PT30M", start="2024-01-15T10:00:00+03:00", comment="Review")

        assert tracker_api.last_body() == {
            "duration": "PT30M",
            "start": "2024-01-15T10:00:00+03:00",
            "comment": "Review",
        }

    @pytest.mark.asyncio
    async def test_get_worklogs(self, tracker_api) -> None:
        """GET /issues/{key}/worklog."""
        tracker_api.respond(json=[{"duration": "PT1H"}])
        adapter = tracker_api.adapter()

        worklogs = await adapter.get_worklogs("Q-1")

        assert worklogs == [{"duration": "PT1H"}]
        assert tracker_api.last_request.method == "GET"

    @pytest.mark.asyncio
    async def test_get_comments_expand(self, tracker_api) -> None:
        """expand is passed in the query string."""
        tracker_api.respond(json=[])
        adapter = tracker_api.adapter()

        await adapter.get_comments("Q-1", expand="attachments,reactions")

        assert tracker_api.last_request.url.path == "/v2/issues/Q-1/comments"
        assert tracker_api.last_request.url.params["expand"] == "attachments,reactions"

    @pytest.mark.asyncio
    async def test_get_comments_without_expand(self, tracker_api) -> None:
        """No expand parameter when not requested."""
        tracker_api.respond(json=[])
        adapter = tracker_api.adapter()

        await adapter.get_comments("Q-1")

        assert "expand" not in tracker_api.last_request.url.params

    @pytest.mark.asyncio
    async def test_add_comment_summonees(self, tracker_api) -> None:
        """summonees are copied verbatim."""
        adapter = tracker_api.adapter()

        await adapter.add_comment("Q-1", "Please review", summonees=["john", "anna"])

        assert tracker_api.last_body() == {"text": "Please review", "summonees": ["john", "anna"]}

    @pytest.mark.asyncio
    async def test_transition_issue(self, tracker_api) -> None:
        """POST to the _execute sub-path; returns the transition list."""
        tracker_api.respond(json=[{"id": "reopen"}])
        adapter = tracker_api.adapter()

        result = await adapter.transition_issue("Q-1", "close")

        assert tracker_api.last_request.method == "POST"
        assert tracker_api.last_request.url.path == "/v2/issues/Q-1/transitions/close/_execute"
        assert tracker_api.last_body() == {}
        assert result == [{"id": "reopen"}]

    @pytest.mark.asyncio
    async def test_transition_issue_with_comment(self, tracker_api) -> None:
        """comment is sent only when present."""
        tracker_api.respond(json=[])
        adapter = tracker_api.adapter()

        await adapter.transition_issue("Q-1", "close", comment="Done")

        assert tracker_api.last_body() == {"comment": "Done"}

    @pytest.mark.asyncio
    async def test_link_issues(self, tracker_api) -> None:
        """relationship and issue are sent verbatim."""
        adapter = tracker_api.adapter()

        await adapter.link_issues("Q-1", "depends on", "Q-2")

        assert tracker_api.last_request.url.path == "/v2/issues/Q-1/links"
        assert tracker_api.last_body() == {"relationship": "depends on", "issue": "Q-2"}

    @pytest.mark.asyncio
    async def test_get_transitions_and_links(self, tracker_api) -> None:
        """List endpoints return bodies unchanged."""
        tracker_api.respond(json=[{"id": "close"}])
        adapter = tracker_api.adapter()

        assert await adapter.get_transitions("Q-1") == [{"id": "close"}]
        assert tracker_api.last_request.url.path == "/v2/issues/Q-1/transitions"
        assert await adapter.get_issue_links("Q-1") == [{"id": "close"}]
        assert tracker_api.last_request.url.path == "/v2/issues/Q-1/links"


@pytest.mark.unit
class TestErrorHandling:
    """Status interpretation."""

    @pytest.mark.asyncio
    async def test_error_messages_detail(self, tracker_api) -> None:
        """errorMessages are joined into the error."""
        tracker_api.respond(404, json={"errorMessages": ["Issue does not exist", "Check key"]})
        adapter = tracker_api.adapter()

        with pytest.raises(TrackerRequestError) as exc_info:
            await adapter.get_issue("Q-404")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == (
            "API request failed: 404 Not Found\nDetails: Issue does not exist, Check key"
        )

    @pytest.mark.asyncio
    async def test_errors_field_detail(self, tracker_api) -> None:
        """A generic errors field is serialized as JSON."""
        tracker_api.respond(400, json={"errors": {"summary": "required"}})
        adapter = tracker_api.adapter()

        with pytest.raises(TrackerRequestError) as exc_info:
            await adapter.create_issue("PROJ", "x")

        assert str(exc_info.value) == (
            'API request failed: 400 Bad Request\nErrors: {"summary": "required"}'
        )

    @pytest.mark.asyncio
    async def test_undecodable_body_keeps_status(self, tracker_api) -> None:
        """A non-JSON error body still yields the status-based error."""
        tracker_api.respond(502, content=b"<html>Bad gateway</html>")
        adapter = tracker_api.adapter()

        with pytest.raises(TrackerRequestError) as exc_info:
            await adapter.get_worklogs("Q-1")

        assert exc_info.value.detail is None
        assert str(exc_info.value) == "API request failed: 502 Bad Gateway"

    @pytest.mark.asyncio
    async def test_no_content_returns_none(self, tracker_api) -> None:
        """204 returns an empty result without decoding."""
        tracker_api.respond(204)
        adapter = tracker_api.adapter()

        result = await adapter.link_issues("Q-1", "relates", "Q-2")

        assert result is None

    @pytest.mark.asyncio
    async def test_empty_error_messages_falls_back_to_errors(self, tracker_api) -> None:
        """An empty errorMessages list is skipped in favour of the errors field."""
        tracker_api.respond(400, json={"errorMessages": [], "errors": {"queue": "unknown"}})
        adapter = tracker_api.adapter()

        with pytest.raises(TrackerRequestError) as exc_info:
            await adapter.create_issue("NOPE", "x")

        assert str(exc_info.value) == 'API request failed: 400 Bad Request\nErrors: {"queue": "unknown"}'

    @pytest.mark.asyncio
    async def test_empty_error_messages_without_errors(self, tracker_api) -> None:
        """No Details line is produced for an empty errorMessages list."""
        tracker_api.respond(403, json={"errorMessages": [], "errors": {}})
        adapter = tracker_api.adapter()

        with pytest.raises(TrackerRequestError) as exc_info:
            await adapter.get_issue("Q-1")

        assert exc_info.value.detail is None
        assert str(exc_info.value) == "API request failed: 403 Forbidden"


@pytest.mark.unit
class TestEmptyOptionalValues:
    """Empty optional values are omitted like absent ones."""

    @pytest.mark.asyncio
    async def test_worklog_empty_start_and_comment(self, tracker_api) -> None:
        """Empty start/comment are not sent."""
        adapter = tracker_api.adapter()

        await adapter.add_worklog("Q-1", "PT1H", start="", comment="")

        assert tracker_api.last_body() == {"duration": "PT1H"}

    @pytest.mark.asyncio
    async def test_create_issue_empty_optionals(self, tracker_api) -> None:
        """Empty description, tags and followers are not sent."""
        adapter = tracker_api.adapter()

        await adapter.create_issue("PROJ", "Title", description="", tags=[], followers=[], sprint="")

        assert tracker_api.last_body() == {"queue": "PROJ", "summary": "Title"}

    @pytest.mark.asyncio
    async def test_transition_and_search_empty_values(self, tracker_api) -> None:
        """Empty comment, query and filter are not sent."""
        tracker_api.respond(json=[])
        adapter = tracker_api.adapter()

        await adapter.transition_issue("Q-1", "close", comment="")
        assert tracker_api.last_body() == {}

        await adapter.search_issues(query="", filter={})
        assert tracker_api.last_body() == {}

    @pytest.mark.asyncio
    async def test_update_keeps_empty_string(self, tracker_api) -> None:
        """Updates send empty strings so a field can be cleared."""
        adapter = tracker_api.adapter()

        await adapter.update_issue("Q-1", {"description": "", "assignee": None})

        assert tracker_api.last_body() == {"description": ""}

    def test_build_body_keep_empty(self) -> None:
        """omit_empty=False drops only None."""
        assert build_body({"a": "", "b": None, "c": []}, omit_empty=False) == {"a": "", "c": []}
