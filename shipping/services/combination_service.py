"""배송 조합 생성 서비스"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .cost_service import CostService
from .dto import Combination, PricedOption, RuleGroup

logger = logging.getLogger(__name__)


class CombinationService:
    """
    배송 조합 후보 생성

    Step A: 장바구니 전체를 커버하는 규칙 그룹의 옵션마다 단일 조합
    Step B: 일부만 커버하는 규칙 그룹의 옵션마다 단일 조합 (covers_all_products=False)
    Step C: A가 비었을 때만, 무료 그룹 + 유료 그룹 쌍으로 혼합 조합
    """

    @staticmethod
    def single_id(group: RuleGroup, option_index: int) -> str:
        return f"{group.rule.id}:{option_index}"

    @staticmethod
    def mixed_id(free_group: RuleGroup, paid_group: RuleGroup, option_index: int) -> str:
        return f"mixed:{free_group.rule.id}+{paid_group.rule.id}:{option_index}"

    @staticmethod
    def single_label(priced: PricedOption) -> str:
        return f"{priced.rule.zone} - {priced.option.name}"

    @staticmethod
    def mixed_label(free_leg: PricedOption, paid_leg: PricedOption) -> str:
        return f"{free_leg.rule.zone} + {paid_leg.rule.zone} - {paid_leg.option.name}"

    @classmethod
    def single_combinations(cls, groups: Iterable[RuleGroup], all_item_ids: frozenset[str]) -> list[Combination]:
        combinations = []
        for group in groups:
            covers_all = group.item_ids == all_item_ids
            for index, option in enumerate(group.rule.options):
                priced = CostService.price(group, option, index)
                combinations.append(
                    Combination(
                        id=cls.single_id(group, index),
                        label=cls.single_label(priced),
                        selections=(priced,),
                        covers_all_products=covers_all,
                    )
                )
        return combinations

    @classmethod
    def mixed_combinations(cls, groups: Sequence[RuleGroup], all_item_ids: frozenset[str]) -> list[Combination]:
        free_groups = [group for group in groups if group.rule.free_shipping and group.rule.options]
        paid_groups = [group for group in groups if not group.rule.free_shipping]

        combinations = []
        for free_group in free_groups:
            for paid_group in paid_groups:
                # 양쪽에 모두 속한 상품은 무료 구간에 배정
                paid_item_ids = paid_group.item_ids - free_group.item_ids
                if not paid_item_ids:
                    continue
                if free_group.item_ids | paid_item_ids != all_item_ids:
                    continue

                free_leg = CostService.price(free_group, free_group.rule.options[0], 0)
                reduced_group = paid_group.restricted_to(paid_item_ids)
                for index, option in enumerate(paid_group.rule.options):
                    paid_leg = CostService.price(reduced_group, option, index)
                    combinations.append(
                        Combination(
                            id=cls.mixed_id(free_group, paid_group, index),
                            label=cls.mixed_label(free_leg, paid_leg),
                            selections=(free_leg, paid_leg),
                            covers_all_products=True,
                        )
                    )
        return combinations

    @classmethod
    def generate(cls, groups: Sequence[RuleGroup], all_item_ids: frozenset[str]) -> list[Combination]:
        """
        조합 후보 생성

        Args:
            groups: 커버리지 필터를 통과한 규칙 그룹
            all_item_ids: 장바구니 전체 항목 ID

        Returns:
            list[Combination]: 정렬되지 않은 조합 목록.
                전체 커버 조합이 없으면 부분 조합만 반환합니다.
        """
        if not all_item_ids:
            return []

        combinations = cls.single_combinations(groups, all_item_ids)
        if any(combination.covers_all_products for combination in combinations):
            return combinations

        mixed = cls.mixed_combinations(groups, all_item_ids)
        if mixed:
            logger.debug("[Combination.generate] 혼합 조합 생성 | count=%d", len(mixed))
        return combinations + mixed
