import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class ResponseFormat(str, Enum):
    """Tool 응답 형식"""
    JSON = "json"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class ToolOutput:
    """
    Use Case 실행 결과.

    payload는 API 응답 그대로의 구조화 데이터, render_markdown은 사람이 읽는 요약을 만듭니다.
    어느 쪽을 내보낼지는 render()에서 한 번만 결정합니다.
    """
    payload: Any
    render_markdown: Callable[[], str]

    def render(self, response_format: ResponseFormat = ResponseFormat.MARKDOWN) -> str:
        if response_format == ResponseFormat.JSON:
            return json.dumps(self.payload, ensure_ascii=False, indent=2)
        return self.render_markdown()
