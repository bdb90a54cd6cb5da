"""
TradeNegotiator - Merchant offers and counter-offer resolution.

This module handles:
- Generating standing offers per merchant variant
- Computing acceptance probabilities for counter-offers
- The per-merchant negotiation state machine (pure transition)
- Applying completed trades to the player

Every public negotiation call is total: invalid input produces a failed
TradeResult, never an exception.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from infra.logger import get_logger

from ..core.types import MerchantState, MerchantVariant, TradeItem, round_half_up
from ..entities.merchant import Merchant, TradeOffer
from ..entities.player import Player

logger = get_logger(__name__)


# Per-variant tuning: probability lost per gold of underpayment, and how many
# failed counter-offers the merchant tolerates before leaving for good.
ACCEPTANCE_SLOPE: Dict[MerchantVariant, float] = {
    MerchantVariant.STANDARD: 0.20,
    MerchantVariant.VOLATILE: 0.25,
    MerchantVariant.RESERVED: 0.15,
}
PATIENCE_LIMIT: Dict[MerchantVariant, int] = {
    MerchantVariant.STANDARD: 5,
    MerchantVariant.VOLATILE: 3,
    MerchantVariant.RESERVED: 7,
}
VOLATILE_OFFENSE_GAP = 4
VOLATILE_COOLDOWN_TURNS = 5

RESERVED_DISCOUNT = 0.85
RESERVED_MIN_PRICE = 3

OFFER_POOL: Tuple[TradeOffer, ...] = (
    TradeOffer(TradeItem.FOOD, 25, 6),
    TradeOffer(TradeItem.FOOD, 35, 8),
    TradeOffer(TradeItem.WATER, 25, 6),
    TradeOffer(TradeItem.WATER, 35, 8),
    TradeOffer(TradeItem.LIFE, 1, 14),
)


def generate_offer(variant: MerchantVariant, rng: random.Random) -> TradeOffer:
    """
    Draw a standing offer from the pool.

    Reserved merchants always discount: max(3, round(price * 0.85)).
    """
    base = OFFER_POOL[rng.randrange(len(OFFER_POOL))]
    if variant == MerchantVariant.RESERVED:
        price = max(RESERVED_MIN_PRICE, round_half_up(base.asking_price * RESERVED_DISCOUNT))
        return TradeOffer(base.item, base.amount, price)
    return base


def acceptance_probability(variant: MerchantVariant, asking: int, offered: int) -> float:
    """
    Probability that ``variant`` accepts ``offered`` gold against ``asking``.

    Falls linearly with the shortfall and bottoms out at 0. Paying the asking
    price or more is always accepted by this curve (the reserved merchant's
    refusal of overpayment is a state-machine rule, not a probability).

    Examples:
        >>> acceptance_probability(MerchantVariant.STANDARD, 10, 10)
        1.0
        >>> round(acceptance_probability(MerchantVariant.STANDARD, 10, 8), 2)
        0.6
        >>> acceptance_probability(MerchantVariant.STANDARD, 10, 5)
        0.0
    """
    shortfall = max(0, asking - offered)
    return max(0.0, 1.0 - ACCEPTANCE_SLOPE[variant] * shortfall)


class Outcome(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    REFUSED_OVERPAY = "refused_overpay"
    DEPARTED_COOLDOWN = "departed_cooldown"
    DEPARTED_PERMANENT = "departed_permanent"


@dataclass(frozen=True)
class Transition:
    """
    Result of the pure negotiation transition.

    Attributes:
        outcome: What happened to the counter-offer
        state: Merchant state after the exchange
        rejection_count: Counter after the exchange
        cooldown_until: Return turn for a temporary departure, else None
        probability: Acceptance probability used (None when no roll happened)
    """

    outcome: Outcome
    state: MerchantState
    rejection_count: int
    cooldown_until: Optional[int] = None
    probability: Optional[float] = None


def transition(
    variant: MerchantVariant,
    state: MerchantState,
    rejection_count: int,
    asking: int,
    offered: int,
    roll: Union[float, Callable[[], float]],
    turn: int,
) -> Transition:
    """
    Resolve one counter-offer against a merchant.

    Pure: the random draw comes in as ``roll`` (uniform in [0, 1)); an offer
    is accepted when ``roll < probability``. ``roll`` may also be a callable
    such as ``rng.random``, called only when chance decides the outcome, so
    exact prices, refusals and offenses leave the RNG untouched. Preconditions (positive offer,
    affordable, merchant present) are checked by the caller.
    """
    shortfall = asking - offered

    def accepted(probability: Optional[float] = None) -> Transition:
        return Transition(Outcome.ACCEPTED, MerchantState.IDLE, 0, None, probability)

    def rejected(probability: float) -> Transition:
        count = rejection_count + 1
        if count >= PATIENCE_LIMIT[variant]:
            return Transition(Outcome.DEPARTED_PERMANENT, MerchantState.UNAVAILABLE, count, None, probability)
        return Transition(Outcome.REJECTED, MerchantState.AWAITING_OFFER, count, None, probability)

    if variant == MerchantVariant.RESERVED:
        if offered > asking:
            return Transition(Outcome.REFUSED_OVERPAY, state, rejection_count)
        if offered == asking:
            return accepted()
    elif variant == MerchantVariant.VOLATILE:
        if offered > asking:
            return accepted()
        if shortfall >= VOLATILE_OFFENSE_GAP:
            return Transition(
                Outcome.DEPARTED_COOLDOWN,
                MerchantState.UNAVAILABLE,
                rejection_count,
                turn + VOLATILE_COOLDOWN_TURNS,
            )
    elif offered >= asking:
        return accepted()

    probability = acceptance_probability(variant, asking, offered)
    draw = roll() if callable(roll) else roll
    if draw < probability:
        return accepted(probability)
    return rejected(probability)


@dataclass
class TradeResult:
    """
    Tagged result of any negotiation call.

    Success carries ``message`` and ``next_offer``; failure carries ``error``
    and, when the merchant is gone, ``trader_departed``. ``remove_from_tile``
    tells the caller to clear the merchant's tile occupancy.
    """

    success: bool
    message: str = ""
    error: Optional[str] = None
    next_offer: Optional[TradeOffer] = None
    trader_departed: bool = False
    remove_from_tile: bool = False
    gold_paid: int = 0
    outcome: Optional[Outcome] = None

    @classmethod
    def ok(cls, message: str, next_offer: Optional[TradeOffer], gold_paid: int = 0) -> TradeResult:
        return cls(
            success=True,
            message=message,
            next_offer=next_offer,
            gold_paid=gold_paid,
            outcome=Outcome.ACCEPTED,
        )

    @classmethod
    def fail(
        cls,
        error: str,
        *,
        trader_departed: bool = False,
        remove_from_tile: bool = False,
        outcome: Optional[Outcome] = None,
    ) -> TradeResult:
        return cls(
            success=False,
            error=error,
            trader_departed=trader_departed,
            remove_from_tile=remove_from_tile,
            outcome=outcome,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize trade result to a plain dict."""
        return {
            "success": self.success,
            "message": self.message,
            "error": self.error,
            "next_offer": self.next_offer.to_dict() if self.next_offer else None,
            "trader_departed": self.trader_departed,
            "remove_from_tile": self.remove_from_tile,
            "gold_paid": self.gold_paid,
            "outcome": self.outcome.value if self.outcome else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TradeResult:
        """Deserialize a trade result from a dict."""
        next_offer = data.get("next_offer")
        outcome = data.get("outcome")
        return cls(
            success=data["success"],
            message=data.get("message", ""),
            error=data.get("error"),
            next_offer=TradeOffer.from_dict(next_offer) if next_offer else None,
            trader_departed=data.get("trader_departed", False),
            remove_from_tile=data.get("remove_from_tile", False),
            gold_paid=data.get("gold_paid", 0),
            outcome=Outcome(outcome) if outcome else None,
        )


_DEPARTURE_MESSAGES = {
    MerchantVariant.STANDARD: "After too many failed offers, the regular trader decides to leave.",
    MerchantVariant.VOLATILE: "After several failed offers, the impatient trader loses patience and leaves.",
    MerchantVariant.RESERVED: "After many failed offers, even the generous trader decides to move on.",
}
_REJECTION_MESSAGES = {
    MerchantVariant.STANDARD: "The trader rejects your offer. You must create a new offer to continue trading.",
    MerchantVariant.VOLATILE: "The impatient trader rejects your offer. Try something closer to their asking price.",
    MerchantVariant.RESERVED: "The generous trader declines this offer. Try offering a bit more gold.",
}


class TradeNegotiator:
    """
    Drives negotiations against Merchant records.

    Holds only the random source; all negotiation state lives on the
    Merchant, so one negotiator can serve every merchant on the map.
    """

    def __init__(self, rng: random.Random | None = None):
        """
        Args:
            rng: Random source for offers and acceptance rolls (seed or stub
                it for deterministic tests)
        """
        self._rng = rng if rng is not None else random.Random()

    def engage(self, merchant: Merchant, turn: int) -> TradeResult:
        """
        Open a negotiation: revive an expired cooldown and post a fresh offer.
        """
        if not merchant.is_available(turn):
            if merchant.departed_permanently:
                return TradeResult.fail("This trader has left for good.", trader_departed=True)
            return TradeResult.fail(
                "This trader is currently unavailable (will return in a few turns).",
                trader_departed=True,
            )

        if merchant.state == MerchantState.UNAVAILABLE:
            # Cooldown expired.
            merchant.cooldown_until = None
            merchant.rejection_count = 0
        merchant.state = MerchantState.AWAITING_OFFER
        merchant.offer = generate_offer(merchant.variant, self._rng)
        logger.debug("Engaged %s with offer %s", merchant.label(), merchant.offer)
        return TradeResult(
            success=True,
            message=f"Found a {merchant.label().title()}!",
            next_offer=merchant.offer,
        )

    def submit_counter_offer(
        self,
        merchant: Merchant,
        player: Player,
        offered_gold: Any,
        turn: int,
    ) -> TradeResult:
        """
        Offer ``offered_gold`` against the merchant's standing asking price.

        Returns:
            TradeResult; merchant state changes only as the variant rules say
        """
        failure = self._check_merchant(merchant, turn)
        if failure is not None:
            return failure
        if isinstance(offered_gold, bool) or not isinstance(offered_gold, int) or offered_gold <= 0:
            return TradeResult.fail("Counter offer must be greater than 0 gold.")
        if offered_gold > player.gold:
            return TradeResult.fail(f"You only have {player.gold} gold.")

        offer = merchant.offer
        result = transition(
            merchant.variant,
            merchant.state,
            merchant.rejection_count,
            offer.asking_price,
            offered_gold,
            self._rng.random,
            turn,
        )

        if result.outcome == Outcome.ACCEPTED:
            return self._complete_trade(merchant, player, offered_gold)

        if result.outcome == Outcome.REFUSED_OVERPAY:
            return TradeResult.fail(
                "The generous trader stops you. They don't want to scam you "
                f"and only want {offer.asking_price} gold.",
                outcome=result.outcome,
            )

        merchant.state = result.state
        merchant.rejection_count = result.rejection_count
        merchant.cooldown_until = result.cooldown_until

        if result.outcome == Outcome.DEPARTED_COOLDOWN:
            logger.info("%s took offense at %d gold and left until turn %d",
                        merchant.label(), offered_gold, result.cooldown_until)
            return TradeResult.fail(
                "Your offer is far below their asking price. The impatient trader "
                "is offended and leaves for a while.",
                trader_departed=True,
                outcome=result.outcome,
            )

        if result.outcome == Outcome.DEPARTED_PERMANENT:
            logger.info("%s left after %d rejected offers", merchant.label(), result.rejection_count)
            return TradeResult.fail(
                _DEPARTURE_MESSAGES[merchant.variant],
                trader_departed=True,
                remove_from_tile=True,
                outcome=result.outcome,
            )

        logger.debug("%s rejected %d gold (p=%.2f)",
                     merchant.label(), offered_gold, result.probability or 0.0)
        return TradeResult.fail(_REJECTION_MESSAGES[merchant.variant], outcome=result.outcome)

    def accept_current_offer(self, merchant: Merchant, player: Player, turn: int = 0) -> TradeResult:
        """Pay the exact asking price; no probability involved."""
        failure = self._check_merchant(merchant, turn)
        if failure is not None:
            return failure
        offer = merchant.offer
        if player.gold < offer.asking_price:
            return TradeResult.fail(f"You need {offer.asking_price} gold to accept this trade.")
        return self._complete_trade(merchant, player, offer.asking_price)

    def reject_current_offer(self, merchant: Merchant, turn: int) -> TradeResult:
        """
        The player walks away.

        Volatile merchants take this as an offense and leave on the same
        cooldown as an insulting offer; everyone else simply goes idle.
        """
        failure = self._check_merchant(merchant, turn, require_offer=False)
        if failure is not None:
            return failure

        if merchant.variant == MerchantVariant.VOLATILE:
            merchant.state = MerchantState.UNAVAILABLE
            merchant.cooldown_until = turn + VOLATILE_COOLDOWN_TURNS
            logger.info("%s was walked away from and left until turn %d",
                        merchant.label(), merchant.cooldown_until)
            return TradeResult(
                success=True,
                message="The impatient trader storms off.",
                trader_departed=True,
                outcome=Outcome.DEPARTED_COOLDOWN,
            )

        merchant.state = MerchantState.IDLE
        return TradeResult(success=True, message="You leave the trader.")

    # ------------------------------------------------------------------#
    # Helpers
    # ------------------------------------------------------------------#
    def _check_merchant(
        self,
        merchant: Merchant,
        turn: int,
        require_offer: bool = True,
    ) -> Optional[TradeResult]:
        if merchant is None:
            return TradeResult.fail("No trader nearby!")
        if not merchant.is_available(turn):
            return TradeResult.fail("This trader has already left.", trader_departed=True)
        if require_offer and merchant.offer is None:
            return TradeResult.fail("No trader nearby!")
        return None

    def _complete_trade(self, merchant: Merchant, player: Player, gold_paid: int) -> TradeResult:
        offer = merchant.offer
        player.apply_trade(offer, gold_paid)

        merchant.state = MerchantState.IDLE
        merchant.rejection_count = 0
        merchant.cooldown_until = None
        merchant.offer = generate_offer(merchant.variant, self._rng)

        message = f"Trade accepted! You {offer.reward_label()} for {gold_paid} gold."
        logger.info("%s: %s", merchant.label(), message)
        return TradeResult.ok(message, merchant.offer, gold_paid=gold_paid)
