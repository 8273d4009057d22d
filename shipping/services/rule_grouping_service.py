"""상품-배송 규칙 그룹핑 서비스"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .base import UnassignableProductWarning
from .dto import CartLine, RuleGroup, ShippingRuleData

logger = logging.getLogger(__name__)


@dataclass
class GroupingResult:
    """그룹핑 결과"""

    groups: list[RuleGroup]
    unassignable_item_ids: list[str]


class RuleGroupingService:
    """
    장바구니 항목을 배송 규칙별 그룹으로 분류

    상품이 여러 규칙에 속하면 해당하는 모든 그룹에 들어갑니다.
    그룹 간 중복은 조합 생성 단계에서 해소됩니다.
    """

    @classmethod
    def rule_membership(cls, lines: Sequence[CartLine]) -> dict[str, frozenset[str]]:
        """상품 ID -> 규칙 ID 집합"""
        membership: dict[str, frozenset[str]] = {}
        for line in lines:
            membership[line.item_id] = membership.get(line.item_id, frozenset()) | frozenset(line.product.rule_ids)
        return membership

    @classmethod
    def group(cls, lines: Sequence[CartLine], rules: Sequence[ShippingRuleData]) -> GroupingResult:
        """
        규칙별 그룹 생성 (커버리지 필터 전)

        Args:
            lines: 장바구니 항목
            rules: 활성 배송 규칙

        Returns:
            GroupingResult: 규칙 순서대로 정렬된 그룹과 규칙을 찾지 못한 항목 ID
        """
        membership = cls.rule_membership(lines)
        known_rule_ids = {rule.id for rule in rules}

        unassignable: list[str] = []
        for line in lines:
            rule_ids = membership[line.item_id]
            if rule_ids & known_rule_ids:
                continue
            if line.item_id in unassignable:
                continue
            unassignable.append(line.item_id)
            logger.warning(
                "[RuleGrouping.group] %s | product_id=%s, rule_ids=%s",
                UnassignableProductWarning.__name__,
                line.item_id,
                sorted(rule_ids),
            )

        groups = []
        for rule in rules:
            members = tuple(line for line in lines if rule.id in membership[line.item_id])
            if members:
                groups.append(RuleGroup(rule=rule, lines=members))

        return GroupingResult(groups=groups, unassignable_item_ids=unassignable)
