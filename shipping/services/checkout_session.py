"""체크아웃 배송 세션

주소/장바구니 변경마다 규칙을 다시 조회하고 견적을 재계산하며,
사용자가 고른 배송 조합을 보관합니다.

상태 전이:
    IDLE -> LOADING -> READY
    IDLE -> LOADING -> FAILED
    (모든 상태) -> LOADING  : 주소/장바구니 변경, retry()

진행 중인 계산보다 새 요청이 먼저 들어오면, 이전 계산 결과는 도착하더라도 버립니다
(세대 번호 비교).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol

from .base import ServiceError, SessionStateError, StaleSelectionError
from .dto import CartLine, Combination, Destination, ShippingQuote, ShippingRuleData
from .shipping_service import ShippingService

logger = logging.getLogger(__name__)


class RuleSource(Protocol):
    async def afetch_active_rules(self) -> list[ShippingRuleData]: ...


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class RuleCache:
    """세션이 소유하는 규칙 캐시 (최신 세대가 조회한 규칙)"""

    def __init__(self):
        self._rules: list[ShippingRuleData] | None = None
        self._generation = 0

    @property
    def rules(self) -> list[ShippingRuleData] | None:
        return self._rules

    @property
    def generation(self) -> int:
        return self._generation

    def store(self, rules: Sequence[ShippingRuleData], generation: int) -> None:
        self._rules = list(rules)
        self._generation = generation

    def clear(self) -> None:
        self._rules = None


@dataclass(frozen=True)
class SelectedShipping:
    """주문 생성 흐름에 넘기는 선택 요약"""

    combination_id: str
    label: str
    shipping_cost: Decimal
    estimated_delivery: str
    is_mixed: bool

    @classmethod
    def from_combination(cls, combination: Combination) -> SelectedShipping:
        return cls(
            combination_id=combination.id,
            label=combination.label,
            shipping_cost=combination.total_price,
            estimated_delivery=combination.estimated_delivery,
            is_mixed=combination.is_mixed,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["shipping_cost"] = str(self.shipping_cost)
        return data


class CheckoutShippingSession:
    """
    체크아웃 배송 세션

    Attributes:
        state: 현재 상태
        quote: 최신 세대의 견적 (READY일 때)
        error_message: FAILED일 때 사용자에게 보여줄 메시지
    """

    def __init__(self, store: RuleSource):
        self._store = store
        self.cache = RuleCache()
        self.state = SessionState.IDLE
        self.quote: ShippingQuote | None = None
        self.error_message: str | None = None
        self._selection: Combination | None = None
        self._generation = 0
        self._cart_lines: list[CartLine] = []
        self._destination: Destination | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def combinations(self) -> list[Combination]:
        return self.quote.combinations if self.quote else []

    @property
    def no_options_available(self) -> bool:
        return self.quote.no_options_available if self.quote else False

    @property
    def selection(self) -> Combination | None:
        return self._selection

    async def update(
        self,
        cart_lines: Sequence[CartLine] | None = None,
        destination: Destination | None = None,
    ) -> ShippingQuote | None:
        """
        장바구니/주소 변경 반영 후 재계산

        Args:
            cart_lines: 새 장바구니 (None이면 이전 값 유지)
            destination: 새 주소 (None이면 이전 값 유지)

        Returns:
            ShippingQuote | None: 이 호출이 최신 세대로 끝났으면 견적, 실패/무효화되었으면 None

        Raises:
            SessionStateError: 주소가 한 번도 지정되지 않음
        """
        if cart_lines is not None:
            self._cart_lines = list(cart_lines)
        if destination is not None:
            self._destination = destination
        if self._destination is None:
            raise SessionStateError("배송지 주소가 필요합니다.")

        return await self._recompute(self._cart_lines, self._destination)

    async def retry(self) -> ShippingQuote | None:
        """FAILED 상태에서 마지막 요청을 다시 실행"""
        if self.state != SessionState.FAILED:
            raise SessionStateError(
                "실패 상태에서만 재시도할 수 있습니다.",
                details={"state": self.state.value},
            )
        logger.info("[CheckoutSession.retry] 재시도 | generation=%d", self._generation)
        return await self._recompute(self._cart_lines, self._destination)

    async def _recompute(self, cart_lines: list[CartLine], destination: Destination) -> ShippingQuote | None:
        self._generation += 1
        generation = self._generation
        self.state = SessionState.LOADING
        self._selection = None
        self.error_message = None

        try:
            rules = await self._store.afetch_active_rules()
        except ServiceError as e:
            if generation != self._generation:
                logger.info("[CheckoutSession.update] 이전 요청 실패 무시 | generation=%d", generation)
                return None
            self._fail(e.message)
            self.cache.clear()
            return None
        except Exception:
            if generation == self._generation:
                self._fail("배송 규칙을 불러오지 못했습니다.")
                self.cache.clear()
            raise

        if generation != self._generation:
            logger.info(
                "[CheckoutSession.update] 이전 요청 결과 폐기 | generation=%d, current=%d",
                generation,
                self._generation,
            )
            return None

        self.cache.store(rules, generation)

        try:
            quote = ShippingService.quote(cart_lines, destination, rules)
        except ServiceError as e:
            self._fail(e.message)
            return None
        except Exception:
            self._fail("배송 옵션을 계산하지 못했습니다.")
            raise

        self.quote = quote
        self.state = SessionState.READY
        return quote

    def _fail(self, message: str) -> None:
        self.state = SessionState.FAILED
        self.quote = None
        self.error_message = message
        logger.warning(
            "[CheckoutSession.update] 계산 실패 | generation=%d, message=%s",
            self._generation,
            message,
        )

    def select(self, combination_id: str) -> Combination:
        """
        배송 조합 선택

        최신 목록에 없거나 전체 상품을 커버하지 않는 조합은 거부합니다.

        Raises:
            SessionStateError: READY 상태가 아님
            StaleSelectionError: 목록에 없는 조합 또는 부분 커버 조합
        """
        if self.state != SessionState.READY:
            raise SessionStateError(
                "배송 옵션 계산이 끝난 뒤에 선택할 수 있습니다.",
                details={"state": self.state.value},
            )

        combination = self.quote.find(combination_id)
        if combination is None or not combination.covers_all_products:
            logger.warning(
                "[CheckoutSession.select] 선택 거부 | combination_id=%s, generation=%d, reason=%s",
                combination_id,
                self._generation,
                "stale" if combination is None else "partial",
            )
            raise StaleSelectionError(
                "선택한 배송 옵션을 더 이상 사용할 수 없습니다. 다시 선택해 주세요.",
                details={"combination_id": combination_id},
            )

        self._selection = combination
        return combination

    def selected_shipping(self) -> SelectedShipping | None:
        if self._selection is None:
            return None
        return SelectedShipping.from_combination(self._selection)
