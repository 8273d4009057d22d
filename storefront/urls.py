"""
URL configuration for storefront project.

- /admin/        관리자 페이지 (배송 규칙 관리)
- /api/shipping/ 배송 옵션 조회 / 선택 API
- /api/schema/   OpenAPI 스키마 및 Swagger UI
"""

from django.contrib import admin
from django.urls import include, path

from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

urlpatterns = [
    # 관리자 페이지
    path("admin/", admin.site.urls),
    # shipping 앱 URLs 포함
    path("api/shipping/", include("shipping.urls")),
    # OpenAPI 스키마 / 문서
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/schema/swagger-ui/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="schema-swagger-ui",
    ),
    path("api/schema/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="schema-redoc"),
]
