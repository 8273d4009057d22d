"""
Shipping Configuration
배송 규칙 엔진 관련 설정을 관리합니다.
"""

import os

# ==========================================
# 커버리지 설정
# ==========================================
#
# 우편번호 목록에 이 값이 들어 있으면 전국 배송 규칙으로 취급합니다.
# 규칙 문서가 "nacional" 마커로 저장되어 있어 기본값을 그대로 사용합니다.
SHIPPING_NATIONWIDE_MARKER = os.environ.get("SHIPPING_NATIONWIDE_MARKER", "nacional")

# 우편번호 제한이 없을 때 전국으로 간주하는 존 라벨
SHIPPING_NATIONAL_ZONE = os.environ.get("SHIPPING_NATIONAL_ZONE", "Nacional")

# ==========================================
# 상품 스냅샷 기본값
# ==========================================

# 카탈로그에 무게가 없는 상품의 기본 무게 (kg)
SHIPPING_DEFAULT_PRODUCT_WEIGHT = os.environ.get("SHIPPING_DEFAULT_PRODUCT_WEIGHT", "1")

# ==========================================
# 서비스 로깅 / 세션
# ==========================================

# 이 시간(ms)을 넘는 서비스 호출은 WARNING으로 기록
SHIPPING_SLOW_CALL_MS = int(os.environ.get("SHIPPING_SLOW_CALL_MS", 100))

# 선택된 배송 조합을 Django 세션에 저장할 때 사용하는 키
SHIPPING_SESSION_KEY = os.environ.get("SHIPPING_SESSION_KEY", "checkout_shipping")
