"""표준화된 로거 모듈.

프로젝트 전체에서 일관된 로깅 형식을 제공합니다.
`configure_logging()`이 루트 핸들러를 구성한 뒤에는 루트로 전파만 하고,
그렇지 않은 경우(스크립트/테스트 단독 실행)에만 stdout 핸들러를 붙입니다.
"""

import logging
import os
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """표준화된 로거를 반환합니다.

    Args:
        name: 로거 이름 (일반적으로 __name__ 사용).

    Returns:
        설정된 로거 인스턴스.
    """
    logger = logging.getLogger(name)

    if not logger.handlers and not logging.getLogger().handlers:
        level = _resolve_level()
        logger.setLevel(level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
