"""CombinationService 단위 테스트"""

from decimal import Decimal

from shipping.services.combination_service import CombinationService
from shipping.services.dto import RuleGroup
from shipping.tests.factories import CartLineFactory, ServiceOptionFactory, ShippingRuleDataFactory


def line(product_id, *rule_ids, **kwargs):
    return CartLineFactory(product__id=product_id, product__rule_ids=rule_ids, **kwargs)


def groups_for(rules, lines):
    return [
        RuleGroup(rule=rule, lines=tuple(item for item in lines if rule.id in item.product.rule_ids))
        for rule in rules
    ]


class TestCombinationServiceSingleRule:
    """단일 규칙 조합 (Step A / B)"""

    def test_full_coverage_one_combination_per_option(self, national_rule):
        """전체를 커버하는 규칙은 옵션마다 조합 하나"""
        # Arrange
        lines = [line("A", "nacional"), line("B", "nacional")]
        groups = groups_for([national_rule], lines)

        # Act
        combinations = CombinationService.generate(groups, frozenset({"A", "B"}))

        # Assert
        assert [c.id for c in combinations] == ["nacional:0", "nacional:1"]
        assert all(c.covers_all_products for c in combinations)
        assert all(not c.is_mixed for c in combinations)
        assert combinations[0].total_price == Decimal("200.00")

    def test_partial_coverage_is_flagged(self):
        """일부만 커버하는 규칙 조합은 covers_all_products=False"""
        # Arrange
        r1 = ShippingRuleDataFactory(id="r1")
        r2 = ShippingRuleDataFactory(id="r2")
        lines = [line("A", "r1"), line("B", "r2")]

        # Act
        combinations = CombinationService.generate(groups_for([r1, r2], lines), frozenset({"A", "B"}))

        # Assert
        assert len(combinations) == 2
        assert not any(c.covers_all_products for c in combinations)

    def test_mixed_not_attempted_when_single_rule_covers_all(self, local_free_rule, national_rule):
        """단일 규칙으로 전체 커버가 가능하면 혼합 조합을 만들지 않음"""
        # Arrange
        lines = [line("A", "local", "nacional"), line("B", "nacional")]

        # Act
        combinations = CombinationService.generate(
            groups_for([local_free_rule, national_rule], lines), frozenset({"A", "B"})
        )

        # Assert
        assert not any(c.is_mixed for c in combinations)
        assert any(c.covers_all_products for c in combinations)

    def test_no_groups_returns_empty(self):
        """커버리지를 통과한 그룹이 없으면 빈 목록"""
        assert CombinationService.generate([], frozenset({"A"})) == []

    def test_empty_cart_returns_empty(self, national_rule):
        """빈 장바구니는 조합 없음"""
        assert CombinationService.generate(groups_for([national_rule], []), frozenset()) == []


class TestCombinationServiceMixed:
    """혼합 조합 (Step C)"""

    def test_free_plus_paid_mixed_combination(self, local_free_rule):
        """
        무료 Local(A) + 유료 Nacional(B, 200) -> 혼합 조합 1개, 총액 200
        """
        # Arrange
        national = ShippingRuleDataFactory(id="nacional", options=(ServiceOptionFactory(price=Decimal("200")),))
        lines = [
            line("A", "local", product__weight=Decimal("2")),
            line("B", "nacional", product__weight=Decimal("1")),
        ]

        # Act
        combinations = CombinationService.generate(
            groups_for([local_free_rule, national], lines), frozenset({"A", "B"})
        )
        mixed = [c for c in combinations if c.is_mixed]

        # Assert
        assert len(mixed) == 1
        assert mixed[0].id == "mixed:local+nacional:0"
        assert mixed[0].total_price == Decimal("200.00")
        assert len(mixed[0].selections) == 2
        assert mixed[0].covers_all_products is True
        assert mixed[0].selections[0].cost == Decimal("0.00")

    def test_one_mixed_combination_per_paid_option(self, mixed_cart, local_free_rule, national_rule):
        """유료 규칙의 옵션마다 혼합 조합 생성"""
        # Act
        combinations = CombinationService.generate(
            groups_for([local_free_rule, national_rule], mixed_cart), frozenset({"A", "B"})
        )
        mixed = [c for c in combinations if c.is_mixed]

        # Assert
        assert [c.id for c in mixed] == ["mixed:local+nacional:0", "mixed:local+nacional:1"]
        assert [c.total_price for c in mixed] == [Decimal("200.00"), Decimal("350.00")]

    def test_overlapping_item_goes_to_free_leg(self):
        """두 그룹에 모두 속한 상품은 무료 구간에 배정, 유료 구간은 나머지만 계산"""
        # Arrange
        free = ShippingRuleDataFactory(id="free", free_shipping=True)
        paid = ShippingRuleDataFactory(
            id="paid",
            options=(ServiceOptionFactory(price=Decimal("100")),),
            extra_unit_fee=Decimal("20"),
        )
        lines = [line("A", "free", "paid"), line("B", "free"), line("C", "paid", quantity=2)]
        all_ids = frozenset({"A", "B", "C"})

        # Act
        combinations = CombinationService.generate(groups_for([free, paid], lines), all_ids)
        mixed = [c for c in combinations if c.is_mixed]

        # Assert
        assert len(mixed) == 1
        free_leg, paid_leg = mixed[0].selections
        assert free_leg.item_ids == frozenset({"A", "B"})
        assert paid_leg.item_ids == frozenset({"C"})
        assert free_leg.item_ids.isdisjoint(paid_leg.item_ids)
        assert free_leg.item_ids | paid_leg.item_ids == all_ids
        # C 2개만 계산: 100 + (2-1) x 20
        assert paid_leg.cost == Decimal("120.00")

    def test_mixed_requires_union_to_cover_cart(self):
        """무료 + 유료 합집합이 장바구니 전체가 아니면 혼합 조합 없음"""
        # Arrange
        free = ShippingRuleDataFactory(id="free", free_shipping=True)
        paid = ShippingRuleDataFactory(id="paid")
        lines = [line("A", "free"), line("B", "paid"), line("C", "other")]

        # Act
        combinations = CombinationService.generate(groups_for([free, paid], lines), frozenset({"A", "B", "C"}))

        # Assert
        assert not any(c.is_mixed for c in combinations)
        assert not any(c.covers_all_products for c in combinations)

    def test_two_paid_groups_do_not_mix(self):
        """유료 + 유료 조합은 만들지 않음"""
        # Arrange
        r1 = ShippingRuleDataFactory(id="r1")
        r2 = ShippingRuleDataFactory(id="r2")
        lines = [line("A", "r1"), line("B", "r2")]

        # Act
        combinations = CombinationService.generate(groups_for([r1, r2], lines), frozenset({"A", "B"}))

        # Assert
        assert not any(c.is_mixed for c in combinations)
