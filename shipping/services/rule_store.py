"""배송 규칙 저장소

ORM 모델(또는 가져오기용 JSON 문서)을 엔진용 ShippingRuleData 스냅샷으로 변환합니다.

사용 예시:
    # 동기 조회 (뷰, 관리 명령)
    rules = RuleStore.fetch_active_rules()

    # 비동기 조회 (체크아웃 세션)
    rules = await RuleStore.afetch_active_rules()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from asgiref.sync import sync_to_async
from django.db import DatabaseError, transaction
from django.db.models import Prefetch

from ..models import ShippingRule, ShippingServiceOption
from .base import ConfigurationError, FetchError, log_service_call
from .dto import (
    PostalRange,
    ServiceOption,
    ShippingRuleData,
    pad_postal_codes,
    to_bool,
    to_decimal,
    to_optional_decimal,
)

logger = logging.getLogger(__name__)


# 가져오기 문서의 이전 필드명 -> 표준 필드명
DOCUMENT_ALIASES = {
    "zona": "zone",
    "activo": "is_active",
    "rangos_postales": "postal_ranges",
    "envio_gratis": "free_shipping",
    "envio_gratis_monto_minimo": "free_shipping_min_amount",
    "costo_por_producto_extra": "extra_unit_fee",
    "costo_por_kg_extra": "extra_kg_fee",
    "peso_base": "base_weight_kg",
    "maximo_productos_por_paquete": "max_units_per_package",
    "peso_maximo_paquete": "max_weight_per_package",
    "opciones_mensajeria": "options",
}

OPTION_ALIASES = {
    "nombre": "carrier",
    "precio": "price",
    "tiempo_entrega": "delivery_window",
    "minDays": "min_days",
    "maxDays": "max_days",
}

# 우편번호 목록은 여러 필드에 나뉘어 저장될 수 있어 모두 합칩니다 (앞쪽 우선)
POSTAL_CODE_KEYS = ("postal_codes", "codigos_postales", "zipcodes", "zipcode")

RANGE_START_KEYS = ("start", "inicio")
RANGE_END_KEYS = ("end", "fin")


def _first_present(entry: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = entry.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _canonical(document: Mapping[str, Any], aliases: Mapping[str, str]) -> dict[str, Any]:
    result = {}
    for key, value in document.items():
        result.setdefault(aliases.get(key, key), value)
    return result


def _optional_int(value: Any) -> int | None:
    number = to_optional_decimal(value)
    if number is None or number < 0:
        return None
    return int(number)


def _optional_amount(value: Any) -> Any:
    number = to_optional_decimal(value)
    if number is None or number < 0:
        return None
    return number


class RuleStore:
    """
    배송 규칙 조회 / 변환 / 저장

    책임:
    - 활성 규칙 조회 (동기/비동기)
    - 경계 변환 (모델, 문서 -> ShippingRuleData)
    - 규칙 검증 (옵션 누락, 잘못된 커버리지 -> ConfigurationError)
    - 규칙 생성 (가져오기 명령)
    """

    @classmethod
    def parse_postal_codes(cls, raw: Any, rule_id: str) -> tuple[str, ...]:
        if raw is None or raw == "":
            return ()
        if isinstance(raw, (str, int)) and not isinstance(raw, bool):
            raw = [raw]
        if isinstance(raw, Mapping):
            # {"0": "06700", "1": "06600"} 형태로 저장된 목록
            raw = list(raw.values())
        if not isinstance(raw, (list, tuple)):
            raise ConfigurationError(
                "우편번호 목록 형식이 올바르지 않습니다.",
                details={"rule_id": rule_id, "postal_codes": repr(raw)},
            )
        codes = []
        for code in raw:
            if isinstance(code, bool) or not isinstance(code, (str, int)):
                raise ConfigurationError(
                    "우편번호는 문자열이어야 합니다.",
                    details={"rule_id": rule_id, "postal_code": repr(code)},
                )
            code = str(code).strip()
            if code:
                codes.append(code)
        return tuple(codes)

    @classmethod
    def parse_postal_ranges(cls, raw: Any, rule_id: str) -> tuple[PostalRange, ...]:
        if raw is None or raw == "":
            return ()
        if not isinstance(raw, (list, tuple)):
            raise ConfigurationError(
                "우편번호 범위 형식이 올바르지 않습니다.",
                details={"rule_id": rule_id, "postal_ranges": repr(raw)},
            )
        ranges = []
        for entry in raw:
            if not isinstance(entry, Mapping):
                raise ConfigurationError(
                    "우편번호 범위는 {start, end} 객체여야 합니다.",
                    details={"rule_id": rule_id, "range": repr(entry)},
                )
            start = _first_present(entry, RANGE_START_KEYS)
            end = _first_present(entry, RANGE_END_KEYS)
            if not start or not end:
                raise ConfigurationError(
                    "우편번호 범위에 start/end가 없습니다.",
                    details={"rule_id": rule_id, "range": dict(entry)},
                )
            padded_start, padded_end = pad_postal_codes(start, end)
            if padded_start > padded_end:
                raise ConfigurationError(
                    "우편번호 범위의 start가 end보다 큽니다.",
                    details={"rule_id": rule_id, "start": start, "end": end},
                )
            ranges.append(PostalRange(start=start, end=end))
        return tuple(ranges)

    @classmethod
    def parse_option(cls, raw: Mapping[str, Any]) -> ServiceOption:
        data = _canonical(raw, OPTION_ALIASES)
        return ServiceOption(
            carrier=str(data.get("carrier") or "").strip(),
            label=str(data.get("label") or "").strip(),
            price=max(to_decimal(data.get("price")), to_decimal(0)),
            min_days=_optional_int(data.get("min_days")),
            max_days=_optional_int(data.get("max_days")),
            delivery_window=str(data.get("delivery_window") or "").strip(),
        )

    @classmethod
    def validate(cls, rule: ShippingRuleData) -> ShippingRuleData:
        """서비스 옵션이 없는 규칙은 사용할 수 없습니다."""
        if not rule.options:
            raise ConfigurationError(
                "배송 서비스 옵션이 없는 규칙입니다.",
                details={"rule_id": rule.id},
            )
        return rule

    @classmethod
    def rule_from_document(cls, document: Mapping[str, Any], default_id: str | None = None) -> ShippingRuleData:
        """
        JSON 문서 -> ShippingRuleData

        Args:
            document: 규칙 문서 (표준 필드명 또는 이전 필드명)
            default_id: 문서에 id가 없을 때 사용할 ID

        Raises:
            ConfigurationError: id 없음, 옵션 목록 없음, 잘못된 커버리지
        """
        if not isinstance(document, Mapping):
            raise ConfigurationError("규칙 문서는 객체여야 합니다.", details={"document": repr(document)})

        data = _canonical(document, DOCUMENT_ALIASES)
        rule_id = str(data.get("id") or default_id or "").strip()
        if not rule_id:
            raise ConfigurationError("규칙 ID가 없습니다.", details={"zone": data.get("zone")})

        postal_codes: list[str] = []
        for key in POSTAL_CODE_KEYS:
            for code in cls.parse_postal_codes(data.get(key), rule_id):
                if code not in postal_codes:
                    postal_codes.append(code)

        raw_options = data.get("options")
        if not isinstance(raw_options, (list, tuple)) or not all(isinstance(o, Mapping) for o in raw_options):
            raise ConfigurationError(
                "배송 서비스 옵션 목록이 없거나 형식이 올바르지 않습니다.",
                details={"rule_id": rule_id},
            )

        rule = ShippingRuleData(
            id=rule_id,
            zone=str(data.get("zone") or "").strip(),
            is_active=to_bool(data.get("is_active"), default=True),
            postal_codes=tuple(postal_codes),
            postal_ranges=cls.parse_postal_ranges(data.get("postal_ranges"), rule_id),
            free_shipping=to_bool(data.get("free_shipping"), default=False),
            free_shipping_min_amount=_optional_amount(data.get("free_shipping_min_amount")),
            free_shipping_min_units=_optional_int(data.get("free_shipping_min_units")),
            extra_unit_fee=_optional_amount(data.get("extra_unit_fee")),
            extra_kg_fee=_optional_amount(data.get("extra_kg_fee")),
            base_weight_kg=_optional_amount(data.get("base_weight_kg")),
            max_units_per_package=_optional_int(data.get("max_units_per_package")),
            max_weight_per_package=_optional_amount(data.get("max_weight_per_package")),
            options=tuple(cls.parse_option(option) for option in raw_options),
        )
        return cls.validate(rule)

    @classmethod
    def rule_from_model(cls, model: ShippingRule) -> ShippingRuleData:
        """
        ShippingRule 모델 -> ShippingRuleData

        options는 prefetch된 position 순서를 그대로 사용합니다.

        Raises:
            ConfigurationError: 옵션 없음, 잘못된 커버리지
        """
        rule_id = model.rule_key
        options = tuple(
            ServiceOption(
                carrier=option.carrier,
                label=option.label,
                price=option.price,
                min_days=option.min_days,
                max_days=option.max_days,
                delivery_window=option.delivery_window,
            )
            for option in model.options.all()
        )
        rule = ShippingRuleData(
            id=rule_id,
            zone=model.zone,
            is_active=model.is_active,
            postal_codes=cls.parse_postal_codes(model.postal_codes, rule_id),
            postal_ranges=cls.parse_postal_ranges(model.postal_ranges, rule_id),
            free_shipping=model.free_shipping,
            free_shipping_min_amount=model.free_shipping_min_amount,
            free_shipping_min_units=model.free_shipping_min_units,
            extra_unit_fee=model.extra_unit_fee,
            extra_kg_fee=model.extra_kg_fee,
            base_weight_kg=model.base_weight_kg,
            max_units_per_package=model.max_units_per_package,
            max_weight_per_package=model.max_weight_per_package,
            options=options,
        )
        return cls.validate(rule)

    @classmethod
    @log_service_call
    def fetch_active_rules(cls) -> list[ShippingRuleData]:
        """
        활성 규칙 조회

        설정 오류가 있는 규칙은 WARNING 로그를 남기고 건너뜁니다.

        Raises:
            FetchError: 데이터베이스 접근 실패
        """
        try:
            models = list(
                ShippingRule.objects.filter(is_active=True).prefetch_related(
                    Prefetch("options", queryset=ShippingServiceOption.objects.order_by("position", "id"))
                )
            )
        except DatabaseError as e:
            raise FetchError("배송 규칙을 불러올 수 없습니다.", details={"error": str(e)}) from e

        rules = []
        for model in models:
            try:
                rules.append(cls.rule_from_model(model))
            except ConfigurationError as e:
                logger.warning(
                    "[RuleStore.fetch_active_rules] 규칙 건너뜀 | rule_id=%s, reason=%s",
                    model.rule_key,
                    e.message,
                )

        logger.info("[RuleStore.fetch_active_rules] 활성 규칙 조회 | count=%d", len(rules))
        return rules

    @classmethod
    async def afetch_active_rules(cls) -> list[ShippingRuleData]:
        """fetch_active_rules의 비동기 버전 (세션의 유일한 await 지점)"""
        return await sync_to_async(cls.fetch_active_rules, thread_sensitive=True)()

    @classmethod
    @transaction.atomic
    def create_rule(cls, rule: ShippingRuleData, keep_id: bool = True) -> ShippingRule:
        """
        검증된 스냅샷으로 규칙과 옵션을 저장

        Args:
            rule: 저장할 규칙
            keep_id: rule.id를 규칙 ID로 저장 (상품의 shipping_rule_ids가 참조).
                False면 ID 없이 저장되어 pk가 규칙 ID가 됩니다.

        Raises:
            ConfigurationError: 같은 규칙 ID가 이미 저장되어 있음
        """
        rule_id = rule.id if keep_id else None
        if rule_id is not None and ShippingRule.objects.filter(rule_id=rule_id).exists():
            raise ConfigurationError("이미 존재하는 규칙 ID입니다.", details={"rule_id": rule_id})

        model = ShippingRule.objects.create(
            rule_id=rule_id,
            zone=rule.zone,
            is_active=rule.is_active,
            postal_codes=list(rule.postal_codes),
            postal_ranges=[{"start": r.start, "end": r.end} for r in rule.postal_ranges],
            free_shipping=rule.free_shipping,
            free_shipping_min_amount=rule.free_shipping_min_amount,
            free_shipping_min_units=rule.free_shipping_min_units,
            extra_unit_fee=rule.extra_unit_fee,
            extra_kg_fee=rule.extra_kg_fee,
            base_weight_kg=rule.base_weight_kg,
            max_units_per_package=rule.max_units_per_package,
            max_weight_per_package=rule.max_weight_per_package,
        )
        ShippingServiceOption.objects.bulk_create(
            [
                ShippingServiceOption(
                    rule=model,
                    carrier=option.carrier,
                    label=option.label,
                    price=option.price,
                    min_days=option.min_days,
                    max_days=option.max_days,
                    delivery_window=option.delivery_window,
                    position=position,
                )
                for position, option in enumerate(rule.options)
            ]
        )
        return model
