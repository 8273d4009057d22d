from .shipping_rule import ShippingRule, ShippingServiceOption

__all__ = [
    "ShippingRule",
    "ShippingServiceOption",
]
