from django.urls import path

from shipping.views.checkout_shipping_views import ShippingOptionsView, ShippingSelectionView

app_name = "shipping"

urlpatterns = [
    path("options/", ShippingOptionsView.as_view(), name="shipping-options"),
    path("selection/", ShippingSelectionView.as_view(), name="shipping-selection"),
]
