"""배송 엔진 데이터 객체

엔진은 ORM 모델이 아닌 불변 스냅샷만 다룹니다.
장바구니/상품/규칙 데이터는 경계(직렬화기, 규칙 저장소)에서 이 형태로 변환됩니다.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from django.conf import settings

ZERO = Decimal("0")
CENT = Decimal("0.01")

_DAYS_PATTERN = re.compile(r"\d+")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """숫자로 변환할 수 없는 값은 default로 대체합니다."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def to_optional_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    result = to_decimal(value, default=Decimal("NaN"))
    return None if result.is_nan() else result


def to_quantity(value: Any) -> int:
    """수량 정규화: 숫자가 아니거나 1 미만이면 1"""
    try:
        quantity = int(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return 1
    return quantity if quantity >= 1 else 1


_TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "si", "sí", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off", ""})


def to_bool(value: Any, default: bool = False) -> bool:
    """문서의 불리언 필드 해석. "false" 같은 문자열도 처리하며, 알 수 없는 값은 default"""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return default


def pad_postal_codes(*codes: str) -> tuple[str, ...]:
    """
    숫자 우편번호를 같은 길이로 0을 채워 맞춤

    "6700"과 "06700"처럼 앞자리 0이 빠진 값도 같은 코드로 비교되도록 합니다.
    숫자가 아닌 값이 섞이면 그대로 반환합니다.
    """
    codes = tuple(code.strip() for code in codes)
    if not all(code.isdigit() for code in codes):
        return codes
    width = max(len(code) for code in codes)
    return tuple(code.zfill(width) for code in codes)


def same_postal_code(left: str, right: str) -> bool:
    left, right = pad_postal_codes(left, right)
    return left == right


# 상품의 배송 규칙 ID 필드 (앞쪽 우선, 비어 있으면 다음 필드)
PRODUCT_RULE_ID_KEYS = (
    "shipping_rule_ids",
    "shippingRuleIds",
    "shipping_rule_id",
    "shippingRuleId",
    "shipping_rules",
    "shippingRules",
)


def normalize_rule_ids(raw: Any) -> list[str]:
    """
    상품의 배송 규칙 ID 필드를 문자열 목록으로 정규화

    지원 형태:
        - 단일 ID: "rule-1" 또는 7
        - ID 목록: ["rule-1", "rule-2"]
        - 참조 객체 목록: [{"id": "rule-1"}, {"rule_id": "rule-2"}]

    Returns:
        list[str]: 중복 없는 ID 목록 (입력 순서 유지)
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, (str, int)) and not isinstance(raw, bool):
        raw = [raw]
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return []

    rule_ids: list[str] = []
    for entry in raw:
        if isinstance(entry, dict):
            entry = entry.get("id") or entry.get("rule_id") or entry.get("ruleId")
        if entry is None or isinstance(entry, bool):
            continue
        rule_id = str(entry).strip()
        if rule_id and rule_id not in rule_ids:
            rule_ids.append(rule_id)
    return rule_ids


@dataclass(frozen=True)
class ProductSnapshot:
    """엔진이 읽는 상품 정보 (카탈로그 소유)"""

    id: str
    weight: Decimal
    price: Decimal
    rule_ids: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> ProductSnapshot:
        raw_weight = data.get("weight")
        if raw_weight is None or raw_weight == "":
            weight = to_decimal(settings.SHIPPING_DEFAULT_PRODUCT_WEIGHT, Decimal("1"))
        else:
            weight = max(to_decimal(raw_weight), ZERO)

        rule_ids: list[str] = []
        for key in PRODUCT_RULE_ID_KEYS:
            rule_ids = normalize_rule_ids(data.get(key))
            if rule_ids:
                break

        return cls(
            id=str(data.get("id", "")),
            weight=weight,
            price=max(to_decimal(data.get("price")), ZERO),
            rule_ids=tuple(rule_ids),
        )


@dataclass(frozen=True)
class CartLine:
    """장바구니 항목 스냅샷. 항목 ID는 상품 ID입니다."""

    product_id: str
    quantity: int
    product: ProductSnapshot

    @property
    def item_id(self) -> str:
        return self.product_id

    @classmethod
    def from_dict(cls, data: dict) -> CartLine:
        product = ProductSnapshot.from_dict(data.get("product") or {})
        product_id = str(data.get("product_id", data.get("productId", product.id)))
        if not product.id:
            product = ProductSnapshot(
                id=product_id, weight=product.weight, price=product.price, rule_ids=product.rule_ids
            )
        return cls(product_id=product_id, quantity=to_quantity(data.get("quantity")), product=product)


@dataclass(frozen=True)
class Destination:
    postal_code: str
    state: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Destination:
        postal_code = data.get("postal_code", data.get("postalCode")) or ""
        return cls(postal_code=str(postal_code).strip(), state=str(data.get("state") or "").strip())


@dataclass(frozen=True)
class ServiceOption:
    """규칙에 속한 배송 서비스 옵션 (택배사/서비스 등급)"""

    carrier: str
    label: str
    price: Decimal
    min_days: int | None = None
    max_days: int | None = None
    delivery_window: str = ""

    @property
    def name(self) -> str:
        return f"{self.carrier} {self.label}".strip()

    @property
    def max_delivery_days(self) -> int | None:
        """
        최대 배송일 (상한)

        max_days가 없으면 delivery_window 문자열("1-3 días")의 마지막 숫자를 사용합니다.
        해석할 수 없으면 None.
        """
        if self.max_days is not None:
            return self.max_days
        numbers = _DAYS_PATTERN.findall(self.delivery_window or "")
        if not numbers:
            return None
        return int(numbers[-1])

    @property
    def delivery_text(self) -> str:
        if self.delivery_window:
            return self.delivery_window
        if self.min_days is not None and self.max_days is not None:
            return f"{self.min_days}-{self.max_days} días"
        if self.max_days is not None:
            return f"{self.max_days} días"
        return ""


@dataclass(frozen=True)
class PostalRange:
    start: str
    end: str

    def contains(self, postal_code: str) -> bool:
        start, end, postal_code = pad_postal_codes(self.start, self.end, postal_code)
        return start <= postal_code <= end


@dataclass(frozen=True)
class ShippingRuleData:
    """배송 규칙 스냅샷"""

    id: str
    zone: str
    options: tuple[ServiceOption, ...]
    is_active: bool = True
    postal_codes: tuple[str, ...] = ()
    postal_ranges: tuple[PostalRange, ...] = ()
    free_shipping: bool = False
    free_shipping_min_amount: Decimal | None = None
    free_shipping_min_units: int | None = None
    extra_unit_fee: Decimal | None = None
    extra_kg_fee: Decimal | None = None
    base_weight_kg: Decimal | None = None
    max_units_per_package: int | None = None
    max_weight_per_package: Decimal | None = None


@dataclass(frozen=True)
class RuleGroup:
    """하나의 규칙과 그 규칙 ID를 가진 장바구니 항목들"""

    rule: ShippingRuleData
    lines: tuple[CartLine, ...]

    @property
    def item_ids(self) -> frozenset[str]:
        return frozenset(line.item_id for line in self.lines)

    def restricted_to(self, item_ids: frozenset[str]) -> RuleGroup:
        return RuleGroup(rule=self.rule, lines=tuple(line for line in self.lines if line.item_id in item_ids))


@dataclass(frozen=True)
class PricedOption:
    """규칙 그룹 + 서비스 옵션 + 계산된 배송비"""

    group: RuleGroup
    option: ServiceOption
    option_index: int
    cost: Decimal
    item_count: int
    total_weight: Decimal
    subtotal: Decimal
    free_reason: str | None = None
    exceeds_limits: bool = False
    limit_reason: str | None = None

    @property
    def rule(self) -> ShippingRuleData:
        return self.group.rule

    @property
    def item_ids(self) -> frozenset[str]:
        return self.group.item_ids

    @property
    def is_free(self) -> bool:
        return self.free_reason is not None


@dataclass(frozen=True)
class Combination:
    """
    구매 가능한 배송 선택지 하나

    단일 규칙 조합은 selections가 1개, 혼합 조합은 무료 구간 + 유료 구간 2개입니다.
    covers_all_products가 False인 조합은 안내용으로만 노출되며 선택할 수 없습니다.
    """

    id: str
    label: str
    selections: tuple[PricedOption, ...]
    covers_all_products: bool
    recommended: bool = False

    @property
    def total_price(self) -> Decimal:
        return sum((selection.cost for selection in self.selections), ZERO)

    @property
    def is_free(self) -> bool:
        return self.total_price == ZERO

    @property
    def is_mixed(self) -> bool:
        return len(self.selections) > 1

    @property
    def exceeds_limits(self) -> bool:
        return any(selection.exceeds_limits for selection in self.selections)

    @property
    def item_ids(self) -> frozenset[str]:
        return frozenset().union(*(selection.item_ids for selection in self.selections))

    @property
    def max_delivery_days(self) -> float:
        """가장 느린 구간의 최대 배송일. 해석 불가하면 무한대 (최악)"""
        days = [selection.option.max_delivery_days for selection in self.selections]
        if not days or any(day is None for day in days):
            return math.inf
        return max(days)

    @property
    def estimated_delivery(self) -> str:
        """가장 느린 구간의 배송 기간 표시 문자열"""
        slowest = max(
            self.selections,
            key=lambda s: s.option.max_delivery_days if s.option.max_delivery_days is not None else math.inf,
        )
        return slowest.option.delivery_text


@dataclass
class ShippingQuote:
    """배송 견적 결과"""

    combinations: list[Combination]
    no_options_available: bool
    message: str | None = None
    unshippable_item_ids: list[str] = field(default_factory=list)

    @property
    def recommended(self) -> Combination | None:
        return next((c for c in self.combinations if c.recommended), None)

    def find(self, combination_id: str) -> Combination | None:
        return next((c for c in self.combinations if c.id == combination_id), None)
