from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.types import MerchantState, MerchantVariant, TradeItem


@dataclass(frozen=True)
class TradeOffer:
    """A merchant's standing offer: ``amount`` of ``item`` for ``asking_price`` gold."""

    item: TradeItem
    amount: int
    asking_price: int

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"Offer amount must be positive: {self.amount}")
        if self.asking_price <= 0:
            raise ValueError(f"Asking price must be positive: {self.asking_price}")

    def reward_label(self) -> str:
        if self.item == TradeItem.LIFE:
            return "gained +1 Life"
        return f"gained +{self.amount} {self.item.value.capitalize()}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item.value,
            "amount": self.amount,
            "asking_price": self.asking_price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TradeOffer:
        return cls(
            item=TradeItem(data["item"]),
            amount=data["amount"],
            asking_price=data["asking_price"],
        )


@dataclass
class Merchant:
    """
    Negotiation record for one merchant tile.

    Only the trading mechanics mutate this record. ``cooldown_until`` is set
    exclusively by the volatile merchant's offense departure; an UNAVAILABLE
    merchant without a cooldown has left for good.

    Attributes:
        variant: Pricing/patience personality
        state: Negotiation state
        offer: Standing offer (None until first engaged)
        rejection_count: Failed counter-offers since the last completed trade
        cooldown_until: Turn at which a temporarily departed merchant returns
    """

    variant: MerchantVariant = MerchantVariant.STANDARD
    state: MerchantState = MerchantState.IDLE
    offer: Optional[TradeOffer] = None
    rejection_count: int = 0
    cooldown_until: Optional[int] = None

    def __post_init__(self):
        if self.rejection_count < 0:
            raise ValueError(f"Rejection count cannot be negative: {self.rejection_count}")

    @property
    def departed_permanently(self) -> bool:
        return self.state == MerchantState.UNAVAILABLE and self.cooldown_until is None

    def is_available(self, turn: int) -> bool:
        """True when the merchant will trade on ``turn``."""
        if self.state != MerchantState.UNAVAILABLE:
            return True
        return self.cooldown_until is not None and turn >= self.cooldown_until

    def label(self) -> str:
        return f"{self.variant.value} trader"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variant": self.variant.value,
            "state": self.state.value,
            "offer": self.offer.to_dict() if self.offer else None,
            "rejection_count": self.rejection_count,
            "cooldown_until": self.cooldown_until,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Merchant:
        offer = data.get("offer")
        return cls(
            variant=MerchantVariant(data["variant"]),
            state=MerchantState(data.get("state", MerchantState.IDLE.value)),
            offer=TradeOffer.from_dict(offer) if offer else None,
            rejection_count=data.get("rejection_count", 0),
            cooldown_until=data.get("cooldown_until"),
        )

    def __str__(self) -> str:
        return f"{self.label()} [{self.state.value}, rejections={self.rejection_count}]"
