"""CostService 단위 테스트"""

from decimal import Decimal

from shipping.services.cost_service import CostService
from shipping.services.dto import RuleGroup
from shipping.tests.factories import CartLineFactory, ServiceOptionFactory, ShippingRuleDataFactory


def make_group(rule, *lines):
    return RuleGroup(rule=rule, lines=tuple(lines))


class TestCostServiceBasePrice:
    """기본 요금 / 추가 요금"""

    def test_single_unit_uses_option_price(self):
        """1개, 무료 조건 없음 -> 옵션 요금"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("200"))
        rule = ShippingRuleDataFactory(options=(option,))
        group = make_group(rule, CartLineFactory(quantity=1))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("200.00")
        assert priced.free_reason is None
        assert priced.exceeds_limits is False

    def test_extra_unit_fee(self):
        """2개, 추가 수량당 20 -> 100 + (2-1) x 20 = 120"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("100"))
        rule = ShippingRuleDataFactory(options=(option,), extra_unit_fee=Decimal("20"))
        group = make_group(rule, CartLineFactory(quantity=2))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("120.00")
        assert priced.item_count == 2

    def test_extra_unit_fee_counts_units_across_lines(self):
        """여러 항목의 수량 합계로 추가 요금 계산"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("100"))
        rule = ShippingRuleDataFactory(options=(option,), extra_unit_fee=Decimal("20"))
        group = make_group(rule, CartLineFactory(quantity=2), CartLineFactory(quantity=1))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("140.00")

    def test_extra_kg_fee_above_base_weight(self):
        """기본 포함 중량 초과분만 kg당 요금"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("100"))
        rule = ShippingRuleDataFactory(
            options=(option,),
            extra_kg_fee=Decimal("10"),
            base_weight_kg=Decimal("2"),
        )
        group = make_group(rule, CartLineFactory(product__weight=Decimal("2.5"), quantity=2))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.total_weight == Decimal("5.0")
        assert priced.cost == Decimal("130.00")

    def test_weight_below_base_has_no_surcharge(self):
        """기본 포함 중량 이하면 중량 요금 없음"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("100"))
        rule = ShippingRuleDataFactory(
            options=(option,),
            extra_kg_fee=Decimal("10"),
            base_weight_kg=Decimal("5"),
        )
        group = make_group(rule, CartLineFactory(product__weight=Decimal("1")))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("100.00")

    def test_non_numeric_weight_counts_as_zero(self):
        """숫자가 아닌 중량은 0으로 취급"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("100"))
        rule = ShippingRuleDataFactory(options=(option,), extra_kg_fee=Decimal("10"))
        group = make_group(rule, CartLineFactory(product__weight="abc"))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.total_weight == Decimal("0")
        assert priced.cost == Decimal("100.00")

    def test_price_never_decreases_when_quantity_grows(self):
        """수량이 늘어도 유료 옵션 요금은 줄지 않음"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("100"))
        rule = ShippingRuleDataFactory(
            options=(option,),
            extra_unit_fee=Decimal("15"),
            extra_kg_fee=Decimal("7.5"),
            base_weight_kg=Decimal("1"),
        )

        # Act
        costs = [
            CostService.price(make_group(rule, CartLineFactory(product__id="P", quantity=quantity)), option).cost
            for quantity in range(1, 8)
        ]

        # Assert
        assert costs == sorted(costs)


class TestCostServiceFreeShipping:
    """무료배송 판정"""

    def test_free_rule_is_zero_regardless_of_weight_and_units(self):
        """무조건 무료 규칙은 중량/수량과 무관하게 0"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("300"))
        rule = ShippingRuleDataFactory(
            options=(option,),
            free_shipping=True,
            extra_unit_fee=Decimal("50"),
            extra_kg_fee=Decimal("50"),
        )
        group = make_group(rule, CartLineFactory(product__weight=Decimal("30"), quantity=10))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("0.00")
        assert priced.free_reason == CostService.FREE_REASON_RULE

    def test_min_amount_reached(self):
        """소계 600 >= 500 -> 무료, 사유 기록"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("200"))
        rule = ShippingRuleDataFactory(options=(option,), free_shipping_min_amount=Decimal("500"))
        group = make_group(rule, CartLineFactory(product__price=Decimal("300"), quantity=2))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.subtotal == Decimal("600")
        assert priced.cost == Decimal("0.00")
        assert priced.free_reason is not None
        assert "500.00" in priced.free_reason

    def test_min_amount_not_reached(self):
        """소계 400 < 500 -> 옵션 요금"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("200"))
        rule = ShippingRuleDataFactory(options=(option,), free_shipping_min_amount=Decimal("500"))
        group = make_group(rule, CartLineFactory(product__price=Decimal("400"), quantity=1))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("200.00")
        assert priced.free_reason is None

    def test_min_amount_boundary_is_inclusive(self):
        """소계가 정확히 기준 금액이면 무료"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("200"))
        rule = ShippingRuleDataFactory(options=(option,), free_shipping_min_amount=Decimal("500"))
        group = make_group(rule, CartLineFactory(product__price=Decimal("500")))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("0.00")

    def test_min_units_reached(self):
        """최소 수량 조건 충족 -> 무료"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("200"))
        rule = ShippingRuleDataFactory(options=(option,), free_shipping_min_units=3)
        group = make_group(rule, CartLineFactory(quantity=3))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.cost == Decimal("0.00")
        assert priced.free_reason == CostService.FREE_REASON_MIN_UNITS.format(units=3)

    def test_reason_priority_rule_flag_first(self):
        """무조건 무료 사유가 최소 금액 사유보다 우선"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("200"))
        rule = ShippingRuleDataFactory(
            options=(option,),
            free_shipping=True,
            free_shipping_min_amount=Decimal("1"),
        )
        group = make_group(rule, CartLineFactory())

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.free_reason == CostService.FREE_REASON_RULE


class TestCostServicePackageLimits:
    """포장 한도 표시"""

    def test_units_over_limit_flagged_but_priced(self):
        """수량 한도 초과는 표시만 하고 요금은 계산"""
        # Arrange
        option = ServiceOptionFactory(price=Decimal("100"))
        rule = ShippingRuleDataFactory(options=(option,), max_units_per_package=2)
        group = make_group(rule, CartLineFactory(quantity=3))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.exceeds_limits is True
        assert "최대 수량" in priced.limit_reason
        assert priced.cost == Decimal("100.00")

    def test_weight_over_limit_flagged(self):
        """중량 한도 초과 표시"""
        # Arrange
        option = ServiceOptionFactory()
        rule = ShippingRuleDataFactory(options=(option,), max_weight_per_package=Decimal("10"))
        group = make_group(rule, CartLineFactory(product__weight=Decimal("6"), quantity=2))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.exceeds_limits is True
        assert "최대 중량" in priced.limit_reason

    def test_within_limits(self):
        """한도 이내면 표시 없음"""
        # Arrange
        option = ServiceOptionFactory()
        rule = ShippingRuleDataFactory(
            options=(option,),
            max_units_per_package=5,
            max_weight_per_package=Decimal("10"),
        )
        group = make_group(rule, CartLineFactory(quantity=5, product__weight=Decimal("2")))

        # Act
        priced = CostService.price(group, option)

        # Assert
        assert priced.exceeds_limits is False
        assert priced.limit_reason is None
