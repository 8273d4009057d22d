"""배송 커버리지 판정 서비스"""

from __future__ import annotations

import logging

from django.conf import settings

from .dto import ShippingRuleData, same_postal_code

logger = logging.getLogger(__name__)


class CoverageService:
    """
    배송 규칙이 목적지 우편번호에 적용되는지 판정

    판정 순서 (먼저 일치하는 항목이 결정):
        1. 전국 마커가 있거나, 전국 존이면서 우편번호 제한이 없음 -> 적용
        2. 명시적 우편번호 목록이 있음 -> 목록에 포함될 때만 적용 (앞자리 0 생략 허용)
        3. 우편번호 범위가 있음 -> 어느 범위에든 포함될 때만 적용
        4. 무조건 무료배송이면서 커버리지 제한이 전혀 없음 -> 적용
        5. 그 외 -> 미적용

    우편번호가 비어 있으면 항상 미적용입니다.
    """

    @classmethod
    def nationwide_marker(cls) -> str:
        return settings.SHIPPING_NATIONWIDE_MARKER.strip().lower()

    @classmethod
    def explicit_postal_codes(cls, rule: ShippingRuleData) -> list[str]:
        marker = cls.nationwide_marker()
        return [code for code in rule.postal_codes if code.strip().lower() != marker]

    @classmethod
    def is_nationwide(cls, rule: ShippingRuleData) -> bool:
        marker = cls.nationwide_marker()
        if any(code.strip().lower() == marker for code in rule.postal_codes):
            return True
        is_national_zone = rule.zone.strip().lower() == settings.SHIPPING_NATIONAL_ZONE.strip().lower()
        return is_national_zone and not cls.explicit_postal_codes(rule) and not rule.postal_ranges

    @classmethod
    def applies(cls, rule: ShippingRuleData, postal_code: str | None, state: str = "") -> bool:
        """
        커버리지 판정

        Args:
            rule: 배송 규칙
            postal_code: 목적지 우편번호
            state: 목적지 주(state). 현재 판정에는 사용하지 않습니다.

        Returns:
            bool: 규칙 적용 여부
        """
        postal_code = (postal_code or "").strip()
        if not postal_code:
            return False

        if cls.is_nationwide(rule):
            return True

        explicit = cls.explicit_postal_codes(rule)
        if explicit:
            return any(same_postal_code(code, postal_code) for code in explicit)

        if rule.postal_ranges:
            return any(postal_range.contains(postal_code) for postal_range in rule.postal_ranges)

        if rule.free_shipping:
            return True

        logger.debug(
            "[Coverage.applies] 커버리지 없음 | rule_id=%s, postal_code=%s, state=%s",
            rule.id,
            postal_code,
            state,
        )
        return False
