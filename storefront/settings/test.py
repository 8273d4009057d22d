"""
Django Test Settings
pytest / Django test 실행 시 자동 선택됩니다.
"""

import os
import tempfile

# base.py는 SECRET_KEY가 없으면 실패하므로 먼저 지정
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret-key-not-for-production")
# 테스트 로그 파일은 작업 트리 밖에 기록
os.environ.setdefault("SHIPPING_LOG_DIR", os.path.join(tempfile.gettempdir(), "storefront-test-logs"))

from storefront.settings.base import *  # noqa: F401, F403, E402
from storefront.settings.components.logging import get_logging_config  # noqa: E402

TESTING = True
DEBUG = True

# 외부 DB 없이 실행
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.dummy.DummyCache",
    }
}

# 느린 호출 경고가 테스트 로그를 어지럽히지 않도록
SHIPPING_SLOW_CALL_MS = 10_000

LOGGING = get_logging_config(debug=False)
