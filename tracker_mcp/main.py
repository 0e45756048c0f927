import asyncio
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from mcp.server import Server
from mcp.server.stdio import stdio_server

from tracker_mcp.adapters.inbound.mcp.tools import register_tools
from tracker_mcp.configuration.container import Container, build_container

logger = logging.getLogger(__name__)

LOG_FILE_NAME = "tracker-mcp-server.log"
_LOG_MAX_BYTES = 10 * 1024 * 1024
_LOG_BACKUP_COUNT = 5

_formatter = logging.Formatter(
    "%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def setup_logging() -> None:
    """stderr 로깅 설정. stdout은 MCP 프로토콜 전용이므로 사용하지 않습니다."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(_formatter)
    root_logger.addHandler(stderr_handler)


def add_file_logging(log_dir: Path) -> RotatingFileHandler:
    """
    log_dir 아래 회전 로그 파일 핸들러를 루트 로거에 추가합니다.

    설정(LOG_DIR)을 읽은 뒤에 호출되므로 그 전의 설정 오류는 stderr에만 기록됩니다.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=_LOG_MAX_BYTES,
        backupCount=_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(_formatter)
    logging.getLogger().addHandler(file_handler)
    return file_handler


def create_server(container: Container) -> Server:
    app = Server(container.settings.server_name)
    register_tools(app)
    return app


async def main() -> None:
    setup_logging()
    try:
        container = build_container()
        file_handler = add_file_logging(container.settings.log_dir)

        logger.info("🚀 %s 시작 (env=%s)", container.settings.server_name, container.settings.app_env)
        logger.info("로그 파일: %s", file_handler.baseFilename)

        app = create_server(container)
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    except Exception:
        logger.exception("❌ MCP 서버 실행 실패")
        raise
    finally:
        logger.info("MCP 서버 종료")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
