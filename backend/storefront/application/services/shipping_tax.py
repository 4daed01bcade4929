"""Shipping and tax totals derived from the cached ``shippingTaxSettings`` entity."""

from dataclasses import dataclass
from typing import Any

from storefront.application.services.entity_cache_store import EntityCacheStore

DEFAULT_SHIPPING_CHARGE = 15.0
DEFAULT_TAX_NAME = "Sales Tax"

DEFAULT_SETTINGS: dict[str, Any] = {
    "shippingSettings": {"shippingCharge": DEFAULT_SHIPPING_CHARGE, "enabled": True},
    "taxSettings": {"taxRate": 8.25, "enabled": True, "taxName": DEFAULT_TAX_NAME},
}


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    shipping: float
    tax: float
    discount: float
    total: float
    tax_name: str
    shipping_charge: float


class ShippingTaxCalculator:
    """Computes checkout totals from whatever settings are resident.

    Accepts the settings object directly or wrapped as ``{"data": {...}}``
    and falls back to the defaults when nothing has been fetched yet.
    """

    def __init__(self, store: EntityCacheStore) -> None:
        self._store = store

    @property
    def settings(self) -> dict[str, Any]:
        data = self._store.get_entity_state("shippingTaxSettings").data
        if isinstance(data, dict):
            if "shippingSettings" in data:
                return data
            if isinstance(data.get("data"), dict):
                return data["data"]
        return DEFAULT_SETTINGS

    @property
    def shipping_enabled(self) -> bool:
        return self.settings.get("shippingSettings", {}).get("enabled", True)

    @property
    def tax_enabled(self) -> bool:
        return self.settings.get("taxSettings", {}).get("enabled", True)

    @property
    def shipping_charge(self) -> float:
        charge = self.settings.get("shippingSettings", {}).get("shippingCharge")
        return float(charge) if charge else DEFAULT_SHIPPING_CHARGE

    @property
    def tax_rate(self) -> float:
        return float(self.settings.get("taxSettings", {}).get("taxRate") or 0)

    @property
    def tax_name(self) -> str:
        return self.settings.get("taxSettings", {}).get("taxName") or DEFAULT_TAX_NAME

    def calculate_shipping(self, subtotal: float) -> float:
        return self.shipping_charge if self.shipping_enabled else 0.0

    def calculate_tax(self, subtotal: float) -> float:
        if not self.tax_enabled:
            return 0.0
        return subtotal * self.tax_rate / 100

    def calculate_totals(self, subtotal: float, coupon_discount: float = 0.0) -> OrderTotals:
        """Tax applies to the discounted subtotal; shipping does not get discounted."""
        shipping = self.calculate_shipping(subtotal)
        discounted = max(0.0, subtotal - coupon_discount)
        tax = self.calculate_tax(discounted)
        return OrderTotals(
            subtotal=round(subtotal, 2),
            shipping=round(shipping, 2),
            tax=round(tax, 2),
            discount=round(coupon_discount, 2),
            total=round(discounted + shipping + tax, 2),
            tax_name=self.tax_name,
            shipping_charge=self.shipping_charge,
        )
