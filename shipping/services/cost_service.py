"""규칙별 배송비 계산 서비스"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from .dto import CENT, ZERO, PricedOption, RuleGroup, ServiceOption, to_decimal

logger = logging.getLogger(__name__)


class CostService:
    """
    (규칙 그룹, 서비스 옵션) 한 쌍의 배송비 계산

    계산 순서:
        1. 수량 합계 / 총 중량 / 상품 소계 집계
        2. 무료배송 판정: 무조건 무료 > 최소 금액 > 최소 수량 (먼저 충족한 사유 기록)
        3. 기본 요금 = 옵션 요금 (무료면 0)
        4. 유료일 때만 추가 수량 요금, 추가 중량 요금 가산
        5. 포장 한도 초과 여부 표시 (분할 배송은 하지 않음)
    """

    # 무료배송 사유
    FREE_REASON_RULE = "무료배송 규칙"
    FREE_REASON_MIN_AMOUNT = "{amount} 이상 구매 무료배송"
    FREE_REASON_MIN_UNITS = "{units}개 이상 구매 무료배송"

    @staticmethod
    def quantize(amount: Decimal) -> Decimal:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def summarize(cls, group: RuleGroup) -> tuple[int, Decimal, Decimal]:
        """(수량 합계, 총 중량, 소계)"""
        item_count = 0
        total_weight = ZERO
        subtotal = ZERO
        for line in group.lines:
            quantity = line.quantity
            item_count += quantity
            total_weight += to_decimal(line.product.weight) * quantity
            subtotal += to_decimal(line.product.price) * quantity
        return item_count, total_weight, subtotal

    @classmethod
    def free_reason(cls, group: RuleGroup, item_count: int, subtotal: Decimal) -> str | None:
        rule = group.rule
        if rule.free_shipping:
            return cls.FREE_REASON_RULE
        if rule.free_shipping_min_amount is not None and subtotal >= rule.free_shipping_min_amount:
            return cls.FREE_REASON_MIN_AMOUNT.format(amount=cls.quantize(rule.free_shipping_min_amount))
        if rule.free_shipping_min_units is not None and item_count >= rule.free_shipping_min_units:
            return cls.FREE_REASON_MIN_UNITS.format(units=rule.free_shipping_min_units)
        return None

    @classmethod
    def limit_reason(cls, group: RuleGroup, item_count: int, total_weight: Decimal) -> str | None:
        rule = group.rule
        reasons = []
        if rule.max_units_per_package is not None and item_count > rule.max_units_per_package:
            reasons.append(f"포장당 최대 수량 {rule.max_units_per_package}개 초과 ({item_count}개)")
        if rule.max_weight_per_package is not None and total_weight > rule.max_weight_per_package:
            reasons.append(f"포장당 최대 중량 {rule.max_weight_per_package}kg 초과 ({total_weight}kg)")
        return ", ".join(reasons) or None

    @classmethod
    def price(cls, group: RuleGroup, option: ServiceOption, option_index: int = 0) -> PricedOption:
        """
        배송비 계산

        Args:
            group: 규칙 그룹
            option: 규칙의 서비스 옵션
            option_index: 규칙 내 옵션 순번 (조합 ID 생성용)

        Returns:
            PricedOption: 배송비, 무료배송 사유, 포장 한도 초과 여부
        """
        rule = group.rule
        item_count, total_weight, subtotal = cls.summarize(group)
        free_reason = cls.free_reason(group, item_count, subtotal)

        if free_reason is not None:
            cost = ZERO
        else:
            cost = max(to_decimal(option.price), ZERO)
            if item_count > 1 and rule.extra_unit_fee:
                cost += (item_count - 1) * max(rule.extra_unit_fee, ZERO)
            if rule.extra_kg_fee:
                base_weight = rule.base_weight_kg or ZERO
                cost += max(ZERO, total_weight - base_weight) * max(rule.extra_kg_fee, ZERO)

        limit_reason = cls.limit_reason(group, item_count, total_weight)
        if limit_reason:
            logger.info(
                "[Cost.price] 포장 한도 초과 | rule_id=%s, reason=%s",
                rule.id,
                limit_reason,
            )

        return PricedOption(
            group=group,
            option=option,
            option_index=option_index,
            cost=cls.quantize(cost),
            item_count=item_count,
            total_weight=total_weight,
            subtotal=subtotal,
            free_reason=free_reason,
            exceeds_limits=limit_reason is not None,
            limit_reason=limit_reason,
        )
