from __future__ import annotations

from rest_framework import serializers

from ..services.dto import CartLine, Destination

# ===== 요청 Serializers =====


class ProductSnapshotInputSerializer(serializers.Serializer):
    """장바구니 항목의 상품 스냅샷"""

    id = serializers.CharField(help_text="상품 ID")
    weight = serializers.DecimalField(
        max_digits=10,
        decimal_places=3,
        min_value=0,
        required=False,
        allow_null=True,
        help_text="중량(kg). 없으면 기본 중량 적용",
    )
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, help_text="단가")
    shipping_rule_ids = serializers.JSONField(
        required=False,
        allow_null=True,
        help_text='배송 규칙 ID. "r1", ["r1", "r2"], [{"id": "r1"}] 형태 모두 허용',
    )


class CartLineInputSerializer(serializers.Serializer):
    """장바구니 항목"""

    product_id = serializers.CharField(help_text="상품 ID")
    quantity = serializers.IntegerField(min_value=1, help_text="수량")
    product = ProductSnapshotInputSerializer()


class DestinationSerializer(serializers.Serializer):
    """배송지 (엔진은 우편번호와 주만 사용)"""

    postal_code = serializers.CharField(max_length=10, allow_blank=True, help_text="우편번호")
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, default="", help_text="주")


class ShippingOptionsRequestSerializer(serializers.Serializer):
    """배송 옵션 조회 요청"""

    items = CartLineInputSerializer(many=True, allow_empty=True)
    destination = DestinationSerializer()

    def get_cart_lines(self) -> list[CartLine]:
        return [CartLine.from_dict(item) for item in self.validated_data["items"]]

    def get_destination(self) -> Destination:
        return Destination.from_dict(self.validated_data["destination"])


class ShippingSelectionRequestSerializer(ShippingOptionsRequestSerializer):
    """배송 옵션 선택 요청"""

    combination_id = serializers.CharField(help_text="선택한 조합 ID")


# ===== 응답 Serializers =====


class DeliverySelectionSerializer(serializers.Serializer):
    """조합 내 배송 구간 (옵션 + 해당 구간이 배송하는 상품)"""

    rule_id = serializers.CharField(source="rule.id")
    zone = serializers.CharField(source="rule.zone")
    carrier = serializers.CharField(source="option.carrier")
    service = serializers.CharField(source="option.label")
    base_price = serializers.DecimalField(source="option.price", max_digits=10, decimal_places=2)
    cost = serializers.DecimalField(max_digits=10, decimal_places=2)
    delivery_window = serializers.CharField(source="option.delivery_text")
    item_ids = serializers.SerializerMethodField()
    free_reason = serializers.CharField(allow_null=True)
    exceeds_limits = serializers.BooleanField()
    limit_reason = serializers.CharField(allow_null=True)

    def get_item_ids(self, obj) -> list[str]:
        # 장바구니 순서 유지
        return [line.item_id for line in obj.group.lines]


class CombinationSerializer(serializers.Serializer):
    """배송 조합"""

    id = serializers.CharField()
    label = serializers.CharField()
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    is_free = serializers.BooleanField()
    is_mixed = serializers.BooleanField()
    covers_all_products = serializers.BooleanField()
    exceeds_limits = serializers.BooleanField()
    recommended = serializers.BooleanField()
    estimated_delivery = serializers.CharField()
    selections = DeliverySelectionSerializer(many=True)


class ShippingQuoteSerializer(serializers.Serializer):
    """배송 견적 응답"""

    combinations = CombinationSerializer(many=True)
    no_options_available = serializers.BooleanField()
    message = serializers.CharField(allow_null=True)
    unshippable_item_ids = serializers.ListField(child=serializers.CharField())


class SelectedShippingSerializer(serializers.Serializer):
    """주문에 저장될 배송 선택 요약"""

    combination_id = serializers.CharField()
    label = serializers.CharField()
    shipping_cost = serializers.DecimalField(max_digits=10, decimal_places=2)
    estimated_delivery = serializers.CharField(allow_blank=True)
    is_mixed = serializers.BooleanField()
