import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from tracker_mcp.domain.errors import ConfigurationError

_CREDENTIAL_VARS = ("YANDEX_TRACKER_IAM_TOKEN", "YANDEX_TRACKER_TOKEN")
_ORG_VARS = ("YANDEX_TRACKER_CLOUD_ORG_ID", "YANDEX_TRACKER_ORG_ID")

# LOG_DIR 미설정 시 사용하는 로그 디렉토리
DEFAULT_LOG_DIR = Path.home() / ".yandex-tracker-mcp" / "logs"


def _load_env() -> None:
    app_env = os.getenv("APP_ENV", "local")
    # 프로젝트 루트 디렉토리 찾기 (tracker_mcp/configuration/settings.py -> ../../)
    project_root = Path(__file__).parent.parent.parent
    env_file = project_root / f".env.{app_env}"
    load_dotenv(env_file)


@dataclass(frozen=True)
class Settings:
    app_env: str
    server_name: str
    tracker_token: str | None          # OAuth 토큰
    tracker_iam_token: str | None      # IAM 토큰 (OAuth보다 우선)
    tracker_org_id: str | None
    tracker_cloud_org_id: str | None   # Cloud Org ID (Org ID보다 우선)
    log_dir: Path = DEFAULT_LOG_DIR


def build_settings() -> Settings:
    _load_env()

    # 인증 토큰과 조직 ID는 각각 둘 중 하나만 있으면 됨
    for group in (_CREDENTIAL_VARS, _ORG_VARS):
        if not any(os.getenv(k) for k in group):
            raise ConfigurationError(f"필수 환경 변수 누락: {' 또는 '.join(group)}")

    return Settings(
        app_env=os.getenv("APP_ENV", "local"),
        server_name=os.getenv("SERVER_NAME", "yandex-tracker-mcp-server"),
        tracker_token=os.getenv("YANDEX_TRACKER_TOKEN") or None,
        tracker_iam_token=os.getenv("YANDEX_TRACKER_IAM_TOKEN") or None,
        tracker_org_id=os.getenv("YANDEX_TRACKER_ORG_ID") or None,
        tracker_cloud_org_id=os.getenv("YANDEX_TRACKER_CLOUD_ORG_ID") or None,
        log_dir=Path(os.getenv("LOG_DIR") or DEFAULT_LOG_DIR).expanduser(),
    )
