"""
Logging Configuration

배송 엔진 로거 구성:
- shipping.services: 견적/규칙 조회/세션 (콘솔 + 파일)
- shipping.views: API 요청 처리 (콘솔)
- shipping.management: 규칙 가져오기 명령 (콘솔 + 파일)
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
LOGS_DIR = Path(os.getenv("SHIPPING_LOG_DIR", BASE_DIR / "logs"))


def _app_logger(handlers: list[str], level: str) -> dict:
    return {"handlers": handlers, "level": level, "propagate": False}


def get_logging_config(debug: bool = False) -> dict:
    """
    환경별 로깅 설정

    debug=True면 서비스 로거가 DEBUG까지 출력되어
    log_service_call의 시작/종료 로그를 볼 수 있습니다.
    """
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    app_level = os.getenv("SHIPPING_LOG_LEVEL", "DEBUG" if debug else "INFO")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{asctime} {levelname} {name} [pid={process:d}] {message}",
                "style": "{",
            },
            "simple": {
                "format": "{levelname} {name} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": app_level,
            },
            "shipping_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": LOGS_DIR / "shipping.log",
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 3,
                "formatter": "verbose",
                "level": "INFO",
            },
        },
        "loggers": {
            # 4xx/5xx 응답
            "django.request": _app_logger(["console"], "WARNING"),
            "shipping.services": _app_logger(["console", "shipping_file"], app_level),
            "shipping.views": _app_logger(["console"], app_level),
            "shipping.management": _app_logger(["console", "shipping_file"], "INFO"),
        },
    }
