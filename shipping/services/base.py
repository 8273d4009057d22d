"""서비스 레이어 공통 모듈

배송 서비스 클래스에서 공통으로 사용하는 로깅 데코레이터와 예외 계층을 제공합니다.
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, TypeVar

from django.conf import settings

logger = logging.getLogger(__name__)

# 제네릭 타입 변수 (반환 타입 보존용)
T = TypeVar("T")


def _service_name(func: Callable) -> str:
    # shipping.services.cost_service -> CostService
    module_name = func.__module__.split(".")[-1]
    return "".join(part.title() for part in module_name.replace("_service", "").split("_")) + "Service"


def log_service_call(func: Callable[..., T]) -> Callable[..., T]:
    """
    서비스 메서드 호출 로깅 데코레이터

    기능:
    - 메서드 호출 시작/종료 DEBUG 로깅
    - 실행 시간 측정 (ms)
    - 느린 실행 경고 (settings.SHIPPING_SLOW_CALL_MS 초과)
    - 비즈니스 예외 WARNING 로깅
    - 시스템 예외 ERROR 로깅 (스택 트레이스 포함)

    사용법:
        @classmethod
        @log_service_call
        def quote(cls, ...):
            ...

    Note:
        예외는 항상 다시 발생시킵니다. 로깅만 담당합니다.
    """

    @wraps(func)
    def wrapper(*args, **kwargs) -> T:
        service_name = _service_name(func)
        func_name = func.__name__
        start_time = time.perf_counter()

        logger.debug(
            "[%s.%s] 호출 시작 | args=%d, kwargs=%s",
            service_name,
            func_name,
            len(args),
            sorted(kwargs),
        )

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed = (time.perf_counter() - start_time) * 1000

            # 비즈니스 에러인지 확인 (code 속성 존재 여부로 판단)
            if hasattr(e, "code") and hasattr(e, "message"):
                logger.warning(
                    "[%s.%s] 비즈니스 에러 | code=%s, message=%s, elapsed=%.2fms",
                    service_name,
                    func_name,
                    e.code,
                    e.message,
                    elapsed,
                )
            else:
                logger.error(
                    "[%s.%s] 예외 발생 | error=%s, elapsed=%.2fms",
                    service_name,
                    func_name,
                    str(e),
                    elapsed,
                    exc_info=True,
                )
            raise

        elapsed = (time.perf_counter() - start_time) * 1000  # ms
        logger.debug(
            "[%s.%s] 호출 완료 | elapsed=%.2fms",
            service_name,
            func_name,
            elapsed,
        )

        slow_call_ms = getattr(settings, "SHIPPING_SLOW_CALL_MS", 100)
        if elapsed > slow_call_ms:
            logger.warning(
                "[%s.%s] 느린 실행 감지 | elapsed=%.2fms",
                service_name,
                func_name,
                elapsed,
            )

        return result

    return wrapper


class ServiceError(Exception):
    """
    서비스 레이어 기본 예외 클래스

    Attributes:
        message: 에러 메시지
        code: 에러 코드 (API 응답에 활용)
        details: 추가 상세 정보
    """

    def __init__(self, message: str, code: str = "SERVICE_ERROR", details: dict | None = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ConfigurationError(ServiceError):
    """배송 규칙 설정 오류 (옵션 없음, 잘못된 커버리지). 해당 규칙만 건너뜁니다."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="RULE_CONFIGURATION", details=details)


class FetchError(ServiceError):
    """규칙 저장소에 접근할 수 없음. 전체 재계산을 중단합니다."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="RULE_FETCH_FAILED", details=details)


class StaleSelectionError(ServiceError):
    """최신 랭킹 목록에 없거나 전체 상품을 커버하지 않는 조합을 선택함"""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="STALE_SELECTION", details=details)


class SessionStateError(ServiceError):
    """현재 세션 상태에서 허용되지 않는 동작"""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="INVALID_SESSION_STATE", details=details)


class UnassignableProductWarning(UserWarning):
    """배송 규칙을 찾을 수 없는 장바구니 항목 (로깅 전용, raise 하지 않음)"""
