"""Supplement and shavings inventory records."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Optional

from models.taxonomy import StockUnit, SupplementFrequency, parse_enum


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class SupplementSubscription:
    supplier: Optional[str] = None
    delivery_frequency_days: int = 30
    quantity_per_delivery: float = 0.0
    last_delivery_date: Optional[str] = None
    next_delivery_date: Optional[str] = None

    def __post_init__(self) -> None:
        if int(self.delivery_frequency_days) <= 0:
            raise ValueError("delivery_frequency_days must be positive")
        self.delivery_frequency_days = int(self.delivery_frequency_days)


@dataclass
class Supplement:
    """A supplement fed to one horse, with its on-hand stock."""

    supplement_id: str
    user_id: str
    name: str
    horse_id: str
    horse_name: str = ""
    brand: Optional[str] = None
    dosage: Optional[str] = None
    frequency: SupplementFrequency = SupplementFrequency.DAILY
    current_stock: float = 0.0
    stock_unit: StockUnit = StockUnit.LBS
    low_stock_threshold: float = 0.0
    notes: Optional[str] = None
    subscription: Optional[SupplementSubscription] = None
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if not str(self.name).strip():
            raise ValueError("Supplement name is required")
        self.frequency = parse_enum(SupplementFrequency, self.frequency)
        self.stock_unit = parse_enum(StockUnit, self.stock_unit)
        self.current_stock = float(self.current_stock)
        self.low_stock_threshold = float(self.low_stock_threshold)
        if isinstance(self.subscription, dict):
            self.subscription = SupplementSubscription(**self.subscription)

    def stock_status(self) -> str:
        if self.current_stock <= 0:
            return "out_of_stock"
        if self.current_stock <= self.low_stock_threshold:
            return "low_stock"
        return "in_stock"

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["frequency"] = self.frequency.value
        payload["stock_unit"] = self.stock_unit.value
        payload["stock_status"] = self.stock_status()
        return payload


@dataclass
class ShavingsInventory:
    """Bedding stock for one barn account; one row per user."""

    user_id: str
    current_bags: float = 0.0
    reorder_threshold: float = 10.0
    supplier: Optional[str] = None
    pending_order_date: Optional[date] = None
    expected_delivery_date: Optional[date] = None
    last_updated: float = field(default_factory=time.time)

    def stock_status(self) -> str:
        """A placed order outranks the bag count until the delivery is recorded."""

        if self.pending_order_date:
            return "ordered"
        if self.current_bags <= 0:
            return "order_now"
        if self.current_bags <= self.reorder_threshold:
            return "low"
        return "ok"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "current_bags": self.current_bags,
            "reorder_threshold": self.reorder_threshold,
            "supplier": self.supplier,
            "pending_order_date": _iso(self.pending_order_date),
            "expected_delivery_date": _iso(self.expected_delivery_date),
            "last_updated": self.last_updated,
            "stock_status": self.stock_status(),
        }


@dataclass
class ShavingsDelivery:
    delivery_id: str
    bags_received: float
    delivered_at: date
    supplier: Optional[str] = None
    notes: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "delivery_id": self.delivery_id,
            "bags_received": self.bags_received,
            "delivered_at": self.delivered_at.isoformat(),
            "supplier": self.supplier,
            "notes": self.notes,
            "created_at": self.created_at,
        }


__all__ = [
    "ShavingsDelivery",
    "ShavingsInventory",
    "Supplement",
    "SupplementSubscription",
]
