"""RankingService 단위 테스트"""

import random
from decimal import Decimal

from shipping.services.dto import Combination, PricedOption, RuleGroup
from shipping.services.ranking_service import RankingService
from shipping.tests.factories import CartLineFactory, ServiceOptionFactory, ShippingRuleDataFactory


def leg(cost, max_days=3, delivery_window="", exceeds_limits=False):
    option = ServiceOptionFactory(max_days=max_days, delivery_window=delivery_window)
    group = RuleGroup(rule=ShippingRuleDataFactory(options=(option,)), lines=(CartLineFactory(),))
    return PricedOption(
        group=group,
        option=option,
        option_index=0,
        cost=Decimal(cost),
        item_count=1,
        total_weight=Decimal("1"),
        subtotal=Decimal("100"),
        exceeds_limits=exceeds_limits,
    )


def combo(combination_id, cost="100", label=None, covers=True, mixed=False, **leg_kwargs):
    selections = (leg("0"), leg(cost, **leg_kwargs)) if mixed else (leg(cost, **leg_kwargs),)
    return Combination(
        id=combination_id,
        label=label or combination_id,
        selections=selections,
        covers_all_products=covers,
    )


def ids(combinations):
    return [c.id for c in combinations]


class TestRankingServiceOrder:
    """정렬 기준"""

    def test_full_coverage_first(self):
        """부분 커버 조합은 더 싸더라도 뒤로"""
        # Arrange
        partial = combo("partial", cost="0", covers=False)
        full = combo("full", cost="500")

        # Act & Assert
        assert ids(RankingService.rank([partial, full])) == ["full", "partial"]

    def test_free_before_paid_then_price(self):
        """무료 > 유료, 유료끼리는 가격 오름차순"""
        # Arrange
        combinations = [combo("expensive", "300"), combo("free", "0"), combo("cheap", "120")]

        # Act & Assert
        assert ids(RankingService.rank(combinations)) == ["free", "cheap", "expensive"]

    def test_simple_before_mixed_at_same_price(self):
        """같은 가격이면 단일 규칙 조합 우선"""
        # Arrange
        mixed = combo("mixed", "200", label="a", mixed=True)
        single = combo("single", "200", label="z")

        # Act & Assert
        assert ids(RankingService.rank([mixed, single])) == ["single", "mixed"]

    def test_exceeding_limits_ranks_lower(self):
        """포장 한도 초과 조합은 뒤로"""
        # Arrange
        over = combo("over", "200", label="a", exceeds_limits=True)
        ok = combo("ok", "200", label="z")

        # Act & Assert
        assert ids(RankingService.rank([over, ok])) == ["ok", "over"]

    def test_faster_delivery_first(self):
        """같은 가격이면 최대 배송일이 짧은 조합 우선"""
        # Arrange
        slow = combo("slow", "200", label="a", max_days=7)
        fast = combo("fast", "200", label="z", max_days=2)

        # Act & Assert
        assert ids(RankingService.rank([slow, fast])) == ["fast", "slow"]

    def test_delivery_window_upper_bound_is_parsed(self):
        """max_days가 없으면 배송 기간 문자열의 상한 사용"""
        # Arrange
        window_5 = combo("window-5", "200", label="a", max_days=None, delivery_window="3-5 días")
        window_2 = combo("window-2", "200", label="z", max_days=None, delivery_window="1-2 días")

        # Act & Assert
        assert ids(RankingService.rank([window_5, window_2])) == ["window-2", "window-5"]

    def test_unparseable_delivery_is_worst(self):
        """배송일을 알 수 없으면 최하위"""
        # Arrange
        unknown = combo("unknown", "200", label="a", max_days=None, delivery_window="consultar")
        slow = combo("slow", "200", label="z", max_days=15)

        # Act & Assert
        assert ids(RankingService.rank([unknown, slow])) == ["slow", "unknown"]

    def test_label_tie_break(self):
        """나머지가 모두 같으면 라벨 사전순"""
        # Arrange
        b = combo("1", "200", label="Nacional - Estafeta B")
        a = combo("2", "200", label="Nacional - Estafeta A")

        # Act & Assert
        assert ids(RankingService.rank([b, a])) == ["2", "1"]


class TestRankingServiceRecommendation:
    """추천 표시 / 결정성"""

    def test_first_complete_combination_is_recommended(self):
        """첫 번째 조합만 추천"""
        # Act
        ranked = RankingService.rank([combo("b", "200"), combo("a", "100")])

        # Assert
        assert [c.recommended for c in ranked] == [True, False]

    def test_no_recommendation_without_full_coverage(self):
        """전체 커버 조합이 없으면 추천 없음"""
        # Act
        ranked = RankingService.rank([combo("p1", covers=False), combo("p2", covers=False)])

        # Assert
        assert not any(c.recommended for c in ranked)

    def test_rank_is_idempotent_and_order_independent(self):
        """입력 순서와 무관하게, 두 번 정렬해도 같은 결과"""
        # Arrange
        combinations = [
            combo("a", "0"),
            combo("b", "120"),
            combo("c", "120", mixed=True),
            combo("d", "90", covers=False),
            combo("e", "120", max_days=1),
        ]
        shuffled = combinations[:]
        random.Random(7).shuffle(shuffled)

        # Act
        first = RankingService.rank(combinations)
        second = RankingService.rank(shuffled)
        third = RankingService.rank(first)

        # Assert
        assert ids(first) == ids(second) == ids(third)
        assert [c.recommended for c in first] == [c.recommended for c in third]
