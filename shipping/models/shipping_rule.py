from django.core.validators import MinValueValidator
from django.db import models


class ShippingRule(models.Model):
    """
    배송 규칙 (배송 존)

    하나의 규칙은 커버리지(우편번호 목록 / 우편번호 범위 / 전국 마커)와
    가격 정책(무료배송 조건, 추가 수량/중량 요금, 포장 한도)을 가지며,
    여러 개의 배송 서비스 옵션(택배사/서비스 등급)을 소유합니다.
    """

    rule_id = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True,
        verbose_name="규칙 ID",
        help_text="상품의 shipping_rule_ids가 참조하는 ID. 비어 있으면 pk를 사용합니다.",
    )
    zone = models.CharField(max_length=100, verbose_name="존 이름", help_text='예: "Local", "Nacional"')
    is_active = models.BooleanField(default=True, verbose_name="활성화 여부")

    # 커버리지
    postal_codes = models.JSONField(
        default=list,
        blank=True,
        verbose_name="우편번호 목록",
        help_text='문자열 목록. 전국 마커 "nacional"을 포함할 수 있습니다.',
    )
    postal_ranges = models.JSONField(
        default=list,
        blank=True,
        verbose_name="우편번호 범위",
        help_text='[{"start": "01000", "end": "01999"}] 형식',
    )

    # 무료배송 조건
    free_shipping = models.BooleanField(default=False, verbose_name="무조건 무료배송")
    free_shipping_min_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        verbose_name="무료배송 최소 금액",
    )
    free_shipping_min_units = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="무료배송 최소 수량",
    )

    # 추가 요금
    extra_unit_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        verbose_name="추가 수량당 요금",
    )
    extra_kg_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        verbose_name="추가 kg당 요금",
    )
    base_weight_kg = models.DecimalField(
        max_digits=8,
        decimal_places=3,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        verbose_name="기본 포함 중량(kg)",
    )

    # 포장 한도 (초과 시 표시만 함)
    max_units_per_package = models.PositiveIntegerField(null=True, blank=True, verbose_name="포장당 최대 수량")
    max_weight_per_package = models.DecimalField(
        max_digits=8,
        decimal_places=3,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        verbose_name="포장당 최대 중량(kg)",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "배송 규칙"
        verbose_name_plural = "배송 규칙"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["is_active"]),
        ]

    @property
    def rule_key(self) -> str:
        """엔진에 노출되는 규칙 ID"""
        return self.rule_id or str(self.pk)

    def __str__(self):
        return f"{self.zone} (#{self.rule_key})"


class ShippingServiceOption(models.Model):
    """배송 규칙에 속한 서비스 옵션 (예: Basico, Express)"""

    rule = models.ForeignKey(
        ShippingRule,
        on_delete=models.CASCADE,
        related_name="options",
        verbose_name="배송 규칙",
    )
    carrier = models.CharField(max_length=100, verbose_name="택배사")
    label = models.CharField(max_length=100, verbose_name="서비스명")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
        verbose_name="기본 요금",
    )
    min_days = models.PositiveIntegerField(null=True, blank=True, verbose_name="최소 배송일")
    max_days = models.PositiveIntegerField(null=True, blank=True, verbose_name="최대 배송일")
    delivery_window = models.CharField(
        max_length=50,
        blank=True,
        verbose_name="배송 기간 표시",
        help_text='예: "1-3 días"',
    )
    position = models.PositiveIntegerField(default=0, verbose_name="정렬 순서")

    class Meta:
        verbose_name = "배송 서비스 옵션"
        verbose_name_plural = "배송 서비스 옵션"
        ordering = ["position", "id"]

    def __str__(self):
        return f"{self.carrier} {self.label} - {self.price}"
