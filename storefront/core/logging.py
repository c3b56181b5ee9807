"""로깅 설정

모든 모듈은 여기서 만든 "storefront" 로거를 import 해서 사용합니다.
"""
import logging
import os
import sys
from typing import Optional

from storefront.core.config import settings

LOGGER_NAME = "storefront"
HANDLER_NAME = "storefront.stdout"

# 요청마다 INFO 로그를 남기는 외부 라이브러리
NOISY_LOGGERS = ("httpx", "httpcore", "redis")

PRODUCTION_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEVELOPMENT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


def is_production(environment: Optional[str] = None) -> bool:
    return (environment or os.getenv("ENVIRONMENT", "development")) == "production"


def setup_logging(level: Optional[str] = None, environment: Optional[str] = None) -> logging.Logger:
    """storefront 로거 초기화

    Args:
        level: 로그 레벨 (기본값: settings.log_level)
        environment: 실행 환경 (기본값: ENVIRONMENT 환경 변수)

    Returns:
        설정된 로거 (여러 번 호출해도 자체 stdout 핸들러는 하나)
    """
    production = is_production(environment)
    log_level = (level or settings.log_level).upper()
    # Production에서는 DEBUG 비활성화
    if production and log_level == "DEBUG":
        log_level = "INFO"
    numeric_level = getattr(logging, log_level, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.propagate = False

    # 외부에서 붙인 핸들러는 건드리지 않음
    handler = next((h for h in logger.handlers if h.get_name() == HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        logger.addHandler(handler)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        logging.Formatter(
            fmt=PRODUCTION_FORMAT if production else DEVELOPMENT_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return logger


logger = setup_logging()


def truncate_for_log(value: str, max_length: int = 100) -> str:
    """검색어 등 사용자 입력을 로그용으로 절단"""
    if not value:
        return "[empty]"
    if len(value) > max_length:
        return value[:max_length] + "..."
    return value
