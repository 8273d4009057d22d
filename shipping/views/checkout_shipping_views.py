from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, serializers as drf_serializers, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from shipping.serializers import (
    SelectedShippingSerializer,
    ShippingOptionsRequestSerializer,
    ShippingQuoteSerializer,
    ShippingSelectionRequestSerializer,
)
from shipping.services import (
    CheckoutShippingSession,
    RuleStore,
    SessionState,
    StaleSelectionError,
)

logger = logging.getLogger(__name__)


# ===== Swagger 문서화용 응답 Serializers =====


class ShippingErrorResponseSerializer(drf_serializers.Serializer):
    """배송 API 에러 응답"""

    error = drf_serializers.CharField()
    message = drf_serializers.CharField()
    retry = drf_serializers.BooleanField(required=False)


class ShippingSelectionResponseSerializer(drf_serializers.Serializer):
    """배송 옵션 선택 응답"""

    message = drf_serializers.CharField()
    selection = SelectedShippingSerializer()


class CheckoutShippingMixin:
    """요청마다 새 체크아웃 세션을 만들어 규칙 조회와 견적을 실행"""

    def compute(self, serializer: ShippingOptionsRequestSerializer) -> tuple[CheckoutShippingSession, Response | None]:
        session = CheckoutShippingSession(RuleStore)
        async_to_sync(session.update)(serializer.get_cart_lines(), serializer.get_destination())

        if session.state == SessionState.FAILED:
            logger.warning("[CheckoutShippingView] 규칙 저장소 오류 | message=%s", session.error_message)
            return session, Response(
                {
                    "error": "RULE_FETCH_FAILED",
                    "message": session.error_message,
                    "retry": True,
                },
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return session, None


class ShippingOptionsView(CheckoutShippingMixin, APIView):
    """배송 옵션 조회"""

    permission_classes = [permissions.AllowAny]

    @extend_schema(
        request=ShippingOptionsRequestSerializer,
        responses={
            200: ShippingQuoteSerializer,
            400: ShippingErrorResponseSerializer,
            503: ShippingErrorResponseSerializer,
        },
        summary="배송 옵션 조회",
        description="""
장바구니와 배송지로 사용 가능한 배송 조합을 추천순으로 반환합니다.

**요청 본문:**
```json
{
    "items": [
        {
            "product_id": "p1",
            "quantity": 2,
            "product": {"id": "p1", "weight": "1.5", "price": "250.00", "shipping_rule_ids": ["r1"]}
        }
    ],
    "destination": {"postal_code": "06700", "state": "CDMX"}
}
```

**특징:**
- 첫 번째 조합이 추천 조합 (전체 상품을 커버할 때만)
- 전체를 커버하는 조합이 없으면 no_options_available=true 와 안내 메시지
- 배송할 수 없는 상품 ID는 unshippable_item_ids 로 반환
        """,
        tags=["배송"],
    )
    def post(self, request: Request) -> Response:
        serializer = ShippingOptionsRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        session, error_response = self.compute(serializer)
        if error_response is not None:
            return error_response

        return Response(ShippingQuoteSerializer(session.quote).data, status=status.HTTP_200_OK)


class ShippingSelectionView(CheckoutShippingMixin, APIView):
    """배송 옵션 선택 / 조회"""

    permission_classes = [permissions.AllowAny]

    @extend_schema(
        request=ShippingSelectionRequestSerializer,
        responses={
            200: ShippingSelectionResponseSerializer,
            400: ShippingErrorResponseSerializer,
            409: ShippingErrorResponseSerializer,
            503: ShippingErrorResponseSerializer,
        },
        summary="배송 옵션 선택",
        description="""
최신 규칙으로 다시 계산한 목록에서 조합을 선택하고 세션에 저장합니다.

**특징:**
- 목록에 없는 조합이나 일부 상품만 커버하는 조합은 409
- 저장된 선택은 GET 으로 조회
        """,
        tags=["배송"],
    )
    def post(self, request: Request) -> Response:
        serializer = ShippingSelectionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        session, error_response = self.compute(serializer)
        if error_response is not None:
            return error_response

        try:
            session.select(serializer.validated_data["combination_id"])
        except StaleSelectionError as e:
            request.session.pop(settings.SHIPPING_SESSION_KEY, None)
            return Response(
                {"error": e.code, "message": e.message},
                status=status.HTTP_409_CONFLICT,
            )

        selection = session.selected_shipping().to_dict()
        request.session[settings.SHIPPING_SESSION_KEY] = selection
        logger.info(
            "[CheckoutShippingView] 배송 옵션 선택 | combination_id=%s, cost=%s",
            selection["combination_id"],
            selection["shipping_cost"],
        )

        return Response(
            {
                "message": "배송 옵션이 선택되었습니다.",
                "selection": selection,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        responses={
            200: SelectedShippingSerializer,
            404: ShippingErrorResponseSerializer,
        },
        summary="선택한 배송 옵션 조회",
        tags=["배송"],
    )
    def get(self, request: Request) -> Response:
        selection = request.session.get(settings.SHIPPING_SESSION_KEY)
        if selection is None:
            return Response(
                {"error": "NO_SELECTION", "message": "선택한 배송 옵션이 없습니다."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(SelectedShippingSerializer(selection).data, status=status.HTTP_200_OK)
