# persona_chat/logger.py
import logging

LOG_FORMAT = "[%(levelname)5s][%(filename)s:%(lineno)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """루트 로거에 스트림 핸들러 하나만 설치"""
    logger = logging.getLogger()
    logger.setLevel(level.upper())
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    logger.addHandler(handler)


def mask_key(key: str) -> str:
    """API 키는 마지막 4자리만 노출"""
    if not key:
        return ""
    return f"...{key[-4:]}"
