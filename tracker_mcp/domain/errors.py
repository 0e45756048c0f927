class TrackerError(Exception):
    """Tracker 연동 오류의 기본 클래스"""


class ConfigurationError(TrackerError):
    """인증 토큰 또는 조직 ID가 설정되지 않은 경우"""


class TrackerRequestError(TrackerError, RuntimeError):
    """Tracker API가 2xx 이외의 상태 코드로 응답한 경우"""

    def __init__(self, status_code: int, reason: str, detail: str | None = None):
        self.status_code = status_code
        self.reason = reason
        self.detail = detail

        message = f"API request failed: {status_code} {reason}"
        if detail:
            message += f"\n{detail}"
        super().__init__(message)
