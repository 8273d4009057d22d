import logging
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from shipping.services.dto import ServiceOption
from shipping.tests.factories import (
    CartLineFactory,
    DestinationFactory,
    ServiceOptionFactory,
    ShippingRuleDataFactory,
    TestConstants,
)

# ==========================================
# 1. 전역 설정 (Session Scope)
# ==========================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging_for_tests():
    """
    테스트 환경에서 로그 propagation 활성화

    caplog가 로그를 캡처할 수 있도록 propagate=True로 설정
    """
    for logger_name in [
        "shipping.services",
        "shipping.views",
        "shipping.management",
    ]:
        logging.getLogger(logger_name).propagate = True


# ==========================================
# 2. API 클라이언트 Fixture
# ==========================================


@pytest.fixture
def api_client():
    """DRF APIClient 인스턴스 (매 테스트마다 새 세션)"""
    return APIClient()


# ==========================================
# 3. 엔진 스냅샷 Fixture
# ==========================================


@pytest.fixture
def destination():
    """CDMX 배송지"""
    return DestinationFactory()


@pytest.fixture
def basic_option() -> ServiceOption:
    """기본 요금 200, 3-5일"""
    return ServiceOptionFactory(carrier="Estafeta", label="Basico", price=Decimal("200"))


@pytest.fixture
def express_option() -> ServiceOption:
    """기본 요금 350, 1-2일"""
    return ServiceOptionFactory(
        carrier="Estafeta",
        label="Express",
        price=Decimal("350"),
        min_days=1,
        max_days=2,
        delivery_window="1-2 días",
    )


@pytest.fixture
def national_rule(basic_option, express_option):
    """전국 유료 규칙 (Basico, Express)"""
    return ShippingRuleDataFactory(id="nacional", options=(basic_option, express_option))


@pytest.fixture
def local_free_rule():
    """CDMX 우편번호 한정 무료배송 규칙"""
    return ShippingRuleDataFactory.local(id="local", postal_codes=(TestConstants.CDMX_POSTAL_CODE,))


@pytest.fixture
def mixed_cart(local_free_rule, national_rule):
    """
    혼합 배송 장바구니

    - A: 2kg, Local 규칙 (무료)
    - B: 1kg, Nacional 규칙 (유료 200)
    """
    return [
        CartLineFactory(product__id="A", product__weight=Decimal("2"), product__rule_ids=(local_free_rule.id,)),
        CartLineFactory(product__id="B", product__weight=Decimal("1"), product__rule_ids=(national_rule.id,)),
    ]
