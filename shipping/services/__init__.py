"""
배송 규칙 조합 엔진 서비스 패키지

서비스 레이어 패턴:
- 엔진 서비스는 ORM에 의존하지 않는 순수 계산 (불변 스냅샷 입력)
- 규칙 저장소만 ORM에 접근
- 체크아웃 세션이 재계산과 선택 상태를 소유
"""

from .base import (
    ConfigurationError,
    FetchError,
    ServiceError,
    SessionStateError,
    StaleSelectionError,
    UnassignableProductWarning,
    log_service_call,
)
from .checkout_session import CheckoutShippingSession, RuleCache, SelectedShipping, SessionState
from .combination_service import CombinationService
from .cost_service import CostService
from .coverage_service import CoverageService
from .dto import (
    CartLine,
    Combination,
    Destination,
    PostalRange,
    PricedOption,
    ProductSnapshot,
    RuleGroup,
    ServiceOption,
    ShippingQuote,
    ShippingRuleData,
    normalize_rule_ids,
)
from .ranking_service import RankingService
from .rule_grouping_service import GroupingResult, RuleGroupingService
from .rule_store import RuleStore
from .shipping_service import ShippingService

__all__ = [
    # Base
    "ServiceError",
    "ConfigurationError",
    "FetchError",
    "StaleSelectionError",
    "SessionStateError",
    "UnassignableProductWarning",
    "log_service_call",
    # Data
    "CartLine",
    "Combination",
    "Destination",
    "PostalRange",
    "PricedOption",
    "ProductSnapshot",
    "RuleGroup",
    "ServiceOption",
    "ShippingQuote",
    "ShippingRuleData",
    "normalize_rule_ids",
    # Services
    "CoverageService",
    "RuleGroupingService",
    "GroupingResult",
    "CostService",
    "CombinationService",
    "RankingService",
    "ShippingService",
    "RuleStore",
    # Session
    "CheckoutShippingSession",
    "RuleCache",
    "SelectedShipping",
    "SessionState",
]
