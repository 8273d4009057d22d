"""배송 조합 정렬 서비스"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .dto import ZERO, Combination


class RankingService:
    """
    조합 정렬 및 추천 표시

    비교 순서 (앞 기준이 같을 때만 다음 기준 적용):
        1. 전체 커버 > 부분 커버
        2. 무료 > 유료
        3. 총 배송비 오름차순
        4. 단일 규칙 > 혼합
        5. 포장 한도 미초과 > 초과
        6. 최대 배송일 오름차순 (해석 불가는 최하위)
        7. 라벨 사전순
        8. 조합 ID 사전순
    """

    @staticmethod
    def sort_key(combination: Combination) -> tuple:
        return (
            not combination.covers_all_products,
            combination.total_price != ZERO,
            combination.total_price,
            combination.is_mixed,
            combination.exceeds_limits,
            combination.max_delivery_days,
            combination.label,
            combination.id,
        )

    @classmethod
    def rank(cls, combinations: Iterable[Combination]) -> list[Combination]:
        """
        정렬 후 첫 번째 조합을 추천으로 표시

        첫 번째 조합이 전체를 커버하지 않으면 추천 조합은 없습니다.
        입력 순서와 무관하게 같은 결과를 반환합니다.
        """
        ordered = sorted(combinations, key=cls.sort_key)
        return [
            replace(combination, recommended=index == 0 and combination.covers_all_products)
            for index, combination in enumerate(ordered)
        ]
