"""
shipping/serializers/__init__.py

Serializer 모듈의 진입점입니다.
"""

from .checkout_shipping_serializers import (
    CartLineInputSerializer,
    CombinationSerializer,
    DeliverySelectionSerializer,
    DestinationSerializer,
    ProductSnapshotInputSerializer,
    SelectedShippingSerializer,
    ShippingOptionsRequestSerializer,
    ShippingQuoteSerializer,
    ShippingSelectionRequestSerializer,
)

__all__ = [
    "CartLineInputSerializer",
    "CombinationSerializer",
    "DeliverySelectionSerializer",
    "DestinationSerializer",
    "ProductSnapshotInputSerializer",
    "SelectedShippingSerializer",
    "ShippingOptionsRequestSerializer",
    "ShippingQuoteSerializer",
    "ShippingSelectionRequestSerializer",
]
