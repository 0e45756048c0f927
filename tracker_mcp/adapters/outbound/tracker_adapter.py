import json
import logging
from typing import Any, Callable, Mapping

import httpx

from tracker_mcp.domain.errors import ConfigurationError, TrackerRequestError
from tracker_mcp.domain.tracker import SearchResult

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.tracker.yandex.net/v2"

_DEFAULT_PAGE_SIZE = 20
_ERROR_BODY_LOG_LIMIT = 500


def _as_key_ref(value: Any) -> dict[str, Any]:
    return {"key": value}


def _as_followers_add(value: Any) -> dict[str, Any]:
    return {"add": value}


def _as_sprint_list(value: Any) -> list[dict[str, Any]]:
    return [{"id": value}]


# 필드명 → 변환 함수 (목록에 없는 필드는 값 그대로 전송)
_CREATE_ISSUE_TRANSFORMS: dict[str, Callable[[Any], Any]] = {
    "type": _as_key_ref,
    "priority": _as_key_ref,
    "followers": _as_followers_add,
    "sprint": _as_sprint_list,
}

_UPDATE_ISSUE_TRANSFORMS: dict[str, Callable[[Any], Any]] = {
    "status": _as_key_ref,
    "type": _as_key_ref,
    "priority": _as_key_ref,
}


def build_body(
    fields: Mapping[str, Any],
    transforms: Mapping[str, Callable[[Any], Any]] | None = None,
    *,
    omit_empty: bool = True,
) -> dict[str, Any]:
    """
    transforms 규칙에 따라 요청 본문을 만듭니다.

    기본적으로 빈 값("", [], {})과 None 필드는 제외합니다.
    omit_empty=False이면 None만 제외합니다 (빈 문자열로 필드를 비우는 수정 요청).
    """
    transforms = transforms or {}
    body: dict[str, Any] = {}
    for name, value in fields.items():
        if value is None or (omit_empty and not value):
            continue
        transform = transforms.get(name)
        body[name] = transform(value) if transform else value
    return body


class TrackerAdapter:
    """Yandex Tracker REST API v2와 통신하는 Outbound Adapter"""

    def __init__(
        self,
        *,
        token: str | None = None,
        iam_token: str | None = None,
        org_id: str | None = None,
        cloud_org_id: str | None = None,
        base_url: str = API_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        # IAM 토큰이 OAuth 토큰보다 우선
        if iam_token:
            self.auth_scheme = "Bearer"
            self._auth_header = f"Bearer {iam_token}"
        elif token:
            self.auth_scheme = "OAuth"
            self._auth_header = f"OAuth {token}"
        else:
            raise ConfigurationError("Either token or iam_token must be provided")

        # Cloud Org ID는 OAuth/IAM 모두와 동작하므로 Org ID보다 우선
        if cloud_org_id:
            self.org_header_name = "X-Cloud-Org-Id"
            self._org_header_value = cloud_org_id
        elif org_id:
            self.org_header_name = "X-Org-Id"
            self._org_header_value = org_id
        else:
            raise ConfigurationError("Either org_id or cloud_org_id must be provided")

        self.base_url = base_url.rstrip("/")
        self._transport = transport
        logger.info("Tracker 인증 방식: %s, 조직 헤더: %s", self.auth_scheme, self.org_header_name)

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    async def get_issue(self, key: str) -> dict[str, Any]:
        return await self._request("GET", f"/issues/{key}")

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
        body = {"queue": queue, "summary": summary}
        body.update(build_body(
            {
                "description": description,
                "type": issue_type,
                "priority": priority,
                "assignee": assignee,
                "parent": parent,
                "followers": followers,
                "tags": tags,
                "sprint": sprint,
            },
            _CREATE_ISSUE_TRANSFORMS,
        ))
        logger.info("🌐 이슈 생성: queue=%s, fields=%s", queue, sorted(body))
        return await self._request("POST", "/issues", body=body)

    async def update_issue(self, key: str, updates: dict[str, Any]) -> dict[str, Any]:
        body = build_body(updates, _UPDATE_ISSUE_TRANSFORMS, omit_empty=False)
        logger.info("🌐 이슈 수정: key=%s, fields=%s", key, sorted(body))
        return await self._request("PATCH", f"/issues/{key}", body=body)

    async def search_issues(
        self,
        query: str | None = None,
        filter: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> SearchResult:
        """
        이슈를 검색합니다.

        offset/limit은 Tracker의 page/perPage 파라미터로 변환됩니다.
        (예: limit=20, offset=45 → perPage=20, page=3)
        """
        per_page = limit or _DEFAULT_PAGE_SIZE
        offset = offset or 0
        page = offset // per_page + 1

        body = build_body({"query": query, "filter": filter, "order": order})
        logger.info("🌐 이슈 검색: perPage=%d, page=%d, body=%s", per_page, page, body)

        issues = await self._request(
            "POST",
            "/issues/_search",
            params={"perPage": per_page, "page": page},
            body=body,
        )

        result = SearchResult.from_page(issues, offset=offset, per_page=per_page)
        logger.info("✅ 검색 결과: %d건 (has_more=%s)", result.count, result.has_more)
        return result

    # ------------------------------------------------------------------
    # Worklogs
    # ------------------------------------------------------------------

    async def add_worklog(
        self, key: str, duration: str, start: str | None = None, comment: str | None = None,
    ) -> dict[str, Any]:
        # duration 형식 검증은 Tracker API에 위임
        body = {"duration": duration, **build_body({"start": start, "comment": comment})}
        return await self._request("POST", f"/issues/{key}/worklog", body=body)

    async def get_worklogs(self, key: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/issues/{key}/worklog")

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def get_comments(self, key: str, expand: str | None = None) -> list[dict[str, Any]]:
        params = {"expand": expand} if expand else None
        return await self._request("GET", f"/issues/{key}/comments", params=params)

    async def add_comment(self, key: str, text: str, summonees: list[str] | None = None) -> dict[str, Any]:
        body = {"text": text, **build_body({"summonees": summonees})}
        return await self._request("POST", f"/issues/{key}/comments", body=body)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def get_transitions(self, key: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/issues/{key}/transitions")

    async def transition_issue(
        self, key: str, transition_id: str, comment: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        상태 전환을 실행합니다.

        _execute 엔드포인트는 이슈가 아니라 전환 이후의 transition 목록을 반환합니다.
        """
        body = build_body({"comment": comment})
        logger.info("🔄 상태 전환 실행: key=%s, transition=%s", key, transition_id)
        return await self._request(
            "POST",
            f"/issues/{key}/transitions/{transition_id}/_execute",
            body=body,
        )

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    async def get_issue_links(self, key: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/issues/{key}/links")

    async def link_issues(self, key: str, relationship: str, issue: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/issues/{key}/links",
            body={"relationship": relationship, "issue": issue},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self._auth_header,
            self.org_header_name: self._org_header_value,
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        """인증/조직 헤더가 설정된 httpx.AsyncClient를 반환합니다."""
        return httpx.AsyncClient(
            headers=self._headers(),
            follow_redirects=True,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """공통 HTTP 요청. 204는 None, 그 외 성공 응답은 디코딩된 JSON을 반환합니다."""
        url = f"{self.base_url}{path}"
        async with self._client() as client:
            response = await client.request(method, url, params=params, json=body)

        logger.info("%s %s: HTTP %d", method, path, response.status_code)

        if not response.is_success:
            logger.error("❌ HTTP 오류 발생: %d", response.status_code)
            logger.error("응답 본문: %s", response.text[:_ERROR_BODY_LOG_LIMIT])
            raise self._request_error(response)

        if response.status_code == 204:
            return None

        return response.json()

    @staticmethod
    def _request_error(response: httpx.Response) -> TrackerRequestError:
        """응답 본문에서 오류 상세를 추출합니다. 본문 디코딩 실패는 무시합니다."""
        detail = None
        try:
            error_data = response.json()
        except ValueError:
            error_data = None

        if isinstance(error_data, dict):
            messages = error_data.get("errorMessages")
            if isinstance(messages, list) and messages:
                detail = f"Details: {', '.join(str(m) for m in messages)}"
            elif error_data.get("errors"):
                detail = f"Errors: {json.dumps(error_data['errors'], ensure_ascii=False)}"

        return TrackerRequestError(response.status_code, response.reason_phrase, detail)
