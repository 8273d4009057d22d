"""배송 견적 서비스 레이어

장바구니 스냅샷 + 목적지 + 배송 규칙으로 정렬된 배송 조합 목록을 만듭니다.

처리 흐름:
    그룹핑 -> 커버리지 필터 -> 배송비 계산 -> 조합 생성 -> 정렬

사용 예시:
    quote = ShippingService.quote(lines, destination, rules)
    if quote.no_options_available:
        ...
    recommended = quote.recommended
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from .base import ConfigurationError, log_service_call
from .combination_service import CombinationService
from .coverage_service import CoverageService
from .dto import CartLine, Destination, ShippingQuote, ShippingRuleData
from .ranking_service import RankingService
from .rule_grouping_service import RuleGroupingService
from .rule_store import RuleStore

logger = logging.getLogger(__name__)


class ShippingService:
    """배송 조합 엔진 진입점"""

    MESSAGE_EMPTY_CART = "장바구니가 비어 있습니다."
    MESSAGE_UNSHIPPABLE = "일부 상품은 이 주소로 배송할 수 없습니다. 다른 주소를 입력해 보세요."
    MESSAGE_NO_COMPLETE_OPTION = "이 주소로 주문 전체를 배송할 수 있는 옵션이 없습니다. 다른 주소를 입력해 보세요."

    @classmethod
    def usable_rules(cls, rules: Sequence[ShippingRuleData | Mapping]) -> list[ShippingRuleData]:
        """
        활성 + 유효한 규칙만 남김

        문서(dict) 형태의 규칙도 받으며, 설정 오류 규칙은 WARNING 로그 후 건너뜁니다.
        """
        usable = []
        for index, rule in enumerate(rules):
            try:
                if isinstance(rule, Mapping):
                    rule = RuleStore.rule_from_document(rule)
                else:
                    RuleStore.validate(rule)
            except ConfigurationError as e:
                logger.warning(
                    "[Shipping.quote] 규칙 건너뜀 | index=%d, code=%s, message=%s, details=%s",
                    index,
                    e.code,
                    e.message,
                    e.details,
                )
                continue
            if rule.is_active:
                usable.append(rule)
        return usable

    @classmethod
    @log_service_call
    def quote(
        cls,
        cart_lines: Sequence[CartLine],
        destination: Destination,
        rules: Sequence[ShippingRuleData | Mapping],
    ) -> ShippingQuote:
        """
        배송 견적 계산

        Args:
            cart_lines: 장바구니 항목 스냅샷
            destination: 목적지 (우편번호, 주)
            rules: 활성 배송 규칙

        Returns:
            ShippingQuote: 정렬된 조합, 전체 커버 조합 없음 여부, 안내 메시지, 배송 불가 항목
        """
        rules = cls.usable_rules(rules)
        grouping = RuleGroupingService.group(cart_lines, rules)

        covered_groups = [
            group
            for group in grouping.groups
            if CoverageService.applies(group.rule, destination.postal_code, destination.state)
        ]

        # 규칙이 없거나 모든 규칙이 목적지를 커버하지 않는 항목
        covered_item_ids = frozenset().union(*(group.item_ids for group in covered_groups))
        unshippable: list[str] = []
        for line in cart_lines:
            if line.item_id not in covered_item_ids and line.item_id not in unshippable:
                unshippable.append(line.item_id)

        all_item_ids = frozenset(line.item_id for line in cart_lines)
        combinations = RankingService.rank(CombinationService.generate(covered_groups, all_item_ids))
        no_options_available = not any(c.covers_all_products for c in combinations)

        message = None
        if no_options_available:
            if not cart_lines:
                message = cls.MESSAGE_EMPTY_CART
            elif unshippable:
                message = cls.MESSAGE_UNSHIPPABLE
            else:
                message = cls.MESSAGE_NO_COMPLETE_OPTION
            logger.info(
                "[Shipping.quote] 전체 커버 조합 없음 | postal_code=%s, unshippable=%s",
                destination.postal_code,
                unshippable,
            )

        logger.info(
            "[Shipping.quote] 견적 완료 | postal_code=%s, rules=%d, groups=%d, combinations=%d",
            destination.postal_code,
            len(rules),
            len(covered_groups),
            len(combinations),
        )

        return ShippingQuote(
            combinations=combinations,
            no_options_available=no_options_available,
            message=message,
            unshippable_item_ids=unshippable,
        )
