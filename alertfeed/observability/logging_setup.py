"""
Logging setup for alertfeed.

loguru is the only logging backend; records emitted through the stdlib
`logging` module (aiohttp, uvicorn, aiosqlite) are routed into it.
"""

from __future__ import annotations
import logging
import sys
from loguru import logger

# 외부 라이브러리 로거 (stdlib logging 사용)
LIBRARY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "aiohttp.access", "aiohttp.client", "aiosqlite")

# ---- 콘솔 포맷 (모듈 이름과 바인딩된 컨텍스트 표시) ----
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> - "
    "<level>{message}</level> <dim>{extra}</dim>"
)


class InterceptHandler(logging.Handler):
    """stdlib logging 레코드를 loguru로 전달"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.bind(name=record.name).opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def _route_library_loggers() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for lib in LIBRARY_LOGGERS:
        lib_logger = logging.getLogger(lib)
        lib_logger.handlers = [InterceptHandler()]
        lib_logger.propagate = False


def setup_logging(log_level: str = "INFO", *, json_logs: bool = False) -> None:
    """
    loguru 싱크를 설정합니다.

    Args:
        log_level: 최소 로그 레벨
        json_logs: True면 한 줄 JSON (애드온 로그 수집용), False면 컬러 콘솔
    """
    logger.remove()
    logger.configure(extra={"name": "alertfeed"})
    if json_logs:
        logger.add(sys.stderr, serialize=True, level=log_level.upper(), backtrace=False, diagnose=False)
    else:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            colorize=True,
            level=log_level.upper(),
            backtrace=False,
            diagnose=False,
        )
    _route_library_loggers()


def get_logger(name: str = "alertfeed", **ctx):
    """모듈 이름(과 선택적 컨텍스트)을 바인딩한 logger 반환."""
    return logger.bind(name=name, **ctx)


def with_context(**ctx):
    """
    블록 안의 모든 로그에 컨텍스트를 붙입니다.

    예: with with_context(cycle=3, feed="eew"): ...
    """
    return logger.contextualize(**ctx)
