"""
Merchant negotiation tests.

Acceptance rolls are injected through a scripted random source so every
sequence below is deterministic.
"""

import random
import unittest

from survival.core.types import MerchantState, MerchantVariant, TradeItem
from survival.entities import Merchant, Player, TradeOffer
from survival.mechanics.trading import (
    OFFER_POOL,
    Outcome,
    TradeNegotiator,
    TradeResult,
    acceptance_probability,
    generate_offer,
    transition,
)


class ScriptedRandom(random.Random):
    """Fixed acceptance roll and fixed offer-pool index."""

    def __init__(self, roll: float = 0.0, index: int = 0):
        super().__init__(0)
        self.roll = roll
        self.index = index
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.roll

    def randrange(self, *args, **kwargs) -> int:
        return self.index


ALWAYS_FAIL = 0.999
ALWAYS_PASS = 0.0


def negotiating(variant: MerchantVariant, asking: int) -> Merchant:
    return Merchant(
        variant=variant,
        state=MerchantState.AWAITING_OFFER,
        offer=TradeOffer(TradeItem.FOOD, 25, asking),
    )


def rich_player(gold: int = 100) -> Player:
    return Player(x=1, y=1, food=50, water=50, gold=gold)


class TestAcceptanceCurve(unittest.TestCase):
    def test_linear_falloff(self) -> None:
        self.assertEqual(acceptance_probability(MerchantVariant.STANDARD, 10, 10), 1.0)
        self.assertAlmostEqual(acceptance_probability(MerchantVariant.STANDARD, 10, 8), 0.6)
        self.assertAlmostEqual(acceptance_probability(MerchantVariant.VOLATILE, 8, 6), 0.5)
        self.assertAlmostEqual(acceptance_probability(MerchantVariant.RESERVED, 10, 7), 0.55)
        self.assertEqual(acceptance_probability(MerchantVariant.STANDARD, 10, 1), 0.0)


class TestTransition(unittest.TestCase):
    def test_standard_pays_asking(self) -> None:
        result = transition(MerchantVariant.STANDARD, MerchantState.AWAITING_OFFER, 3, 10, 10, ALWAYS_FAIL, 0)
        self.assertEqual(result.outcome, Outcome.ACCEPTED)
        self.assertEqual(result.rejection_count, 0)
        self.assertEqual(result.state, MerchantState.IDLE)

    def test_roll_must_be_below_probability(self) -> None:
        accepted = transition(MerchantVariant.STANDARD, MerchantState.AWAITING_OFFER, 0, 10, 8, 0.59, 0)
        rejected = transition(MerchantVariant.STANDARD, MerchantState.AWAITING_OFFER, 0, 10, 8, 0.6, 0)
        self.assertEqual(accepted.outcome, Outcome.ACCEPTED)
        self.assertEqual(rejected.outcome, Outcome.REJECTED)
        self.assertEqual(rejected.rejection_count, 1)

    def test_reserved_refuses_overpayment(self) -> None:
        result = transition(MerchantVariant.RESERVED, MerchantState.AWAITING_OFFER, 2, 10, 11, ALWAYS_PASS, 0)
        self.assertEqual(result.outcome, Outcome.REFUSED_OVERPAY)
        self.assertEqual(result.rejection_count, 2)
        self.assertEqual(result.state, MerchantState.AWAITING_OFFER)

    def test_volatile_offense_has_no_roll(self) -> None:
        result = transition(MerchantVariant.VOLATILE, MerchantState.AWAITING_OFFER, 1, 8, 4, ALWAYS_PASS, 12)
        self.assertEqual(result.outcome, Outcome.DEPARTED_COOLDOWN)
        self.assertEqual(result.cooldown_until, 17)
        self.assertEqual(result.rejection_count, 1)
        self.assertIsNone(result.probability)

    def test_patience_limits(self) -> None:
        for variant, limit in (
            (MerchantVariant.STANDARD, 5),
            (MerchantVariant.VOLATILE, 3),
            (MerchantVariant.RESERVED, 7),
        ):
            before = transition(variant, MerchantState.AWAITING_OFFER, limit - 2, 10, 8, ALWAYS_FAIL, 0)
            last = transition(variant, MerchantState.AWAITING_OFFER, limit - 1, 10, 8, ALWAYS_FAIL, 0)
            self.assertEqual(before.outcome, Outcome.REJECTED, variant)
            self.assertEqual(last.outcome, Outcome.DEPARTED_PERMANENT, variant)
            self.assertIsNone(last.cooldown_until)


class TestStandardNegotiation(unittest.TestCase):
    def test_asking_price_always_accepted(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_FAIL))
        merchant = negotiating(MerchantVariant.STANDARD, 10)
        player = rich_player()

        result = negotiator.submit_counter_offer(merchant, player, 10, turn=1)

        self.assertTrue(result.success)
        self.assertEqual(result.gold_paid, 10)
        self.assertEqual(player.gold, 90)
        self.assertEqual(player.food, 75)
        self.assertEqual(merchant.state, MerchantState.IDLE)
        self.assertEqual(merchant.rejection_count, 0)
        self.assertIsNotNone(result.next_offer)

    def test_five_rejections_then_gone(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_FAIL))
        merchant = negotiating(MerchantVariant.STANDARD, 10)
        player = rich_player()

        for attempt in range(4):
            result = negotiator.submit_counter_offer(merchant, player, 5, turn=attempt)
            self.assertFalse(result.success)
            self.assertFalse(result.trader_departed)
            self.assertEqual(merchant.rejection_count, attempt + 1)

        result = negotiator.submit_counter_offer(merchant, player, 5, turn=4)
        self.assertFalse(result.success)
        self.assertTrue(result.trader_departed)
        self.assertTrue(result.remove_from_tile)
        self.assertEqual(merchant.state, MerchantState.UNAVAILABLE)
        self.assertTrue(merchant.departed_permanently)

        again = negotiator.submit_counter_offer(merchant, player, 10, turn=5)
        self.assertFalse(again.success)
        self.assertTrue(again.trader_departed)
        self.assertEqual(player.gold, 100)
        self.assertFalse(merchant.is_available(1000))

    def test_lucky_roll_accepts_low_offer(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_PASS))
        merchant = negotiating(MerchantVariant.STANDARD, 10)
        player = rich_player()

        result = negotiator.submit_counter_offer(merchant, player, 8, turn=0)
        self.assertTrue(result.success)
        self.assertEqual(player.gold, 92)


class TestVolatileNegotiation(unittest.TestCase):
    def test_insult_leaves_with_cooldown(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_PASS))
        merchant = negotiating(MerchantVariant.VOLATILE, 8)
        player = rich_player()
        turn = 10

        result = negotiator.submit_counter_offer(merchant, player, 3, turn=turn)

        self.assertFalse(result.success)
        self.assertTrue(result.trader_departed)
        self.assertFalse(result.remove_from_tile)
        self.assertFalse(merchant.is_available(turn + 4))
        self.assertTrue(merchant.is_available(turn + 5))
        self.assertEqual(player.gold, 100)

        blocked = negotiator.engage(merchant, turn + 4)
        self.assertFalse(blocked.success)
        revived = negotiator.engage(merchant, turn + 5)
        self.assertTrue(revived.success)
        self.assertEqual(merchant.state, MerchantState.AWAITING_OFFER)
        self.assertIsNone(merchant.cooldown_until)

    def test_overpayment_accepted(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_FAIL))
        merchant = negotiating(MerchantVariant.VOLATILE, 8)
        self.assertTrue(negotiator.submit_counter_offer(merchant, rich_player(), 9, turn=0).success)

    def test_patience_exhaustion_is_permanent(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_FAIL))
        merchant = negotiating(MerchantVariant.VOLATILE, 8)
        player = rich_player()

        results = [negotiator.submit_counter_offer(merchant, player, 6, turn=t) for t in range(3)]

        self.assertEqual([r.trader_departed for r in results], [False, False, True])
        self.assertTrue(results[-1].remove_from_tile)
        self.assertIsNone(merchant.cooldown_until)
        self.assertFalse(merchant.is_available(100))

    def test_walking_away_offends(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom())
        merchant = negotiating(MerchantVariant.VOLATILE, 8)

        result = negotiator.reject_current_offer(merchant, turn=3)

        self.assertTrue(result.trader_departed)
        self.assertEqual(merchant.state, MerchantState.UNAVAILABLE)
        self.assertEqual(merchant.cooldown_until, 8)


class TestReservedNegotiation(unittest.TestCase):
    def test_overpayment_refused_without_penalty(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_PASS))
        merchant = negotiating(MerchantVariant.RESERVED, 10)
        player = rich_player()

        result = negotiator.submit_counter_offer(merchant, player, 12, turn=0)

        self.assertFalse(result.success)
        self.assertFalse(result.trader_departed)
        self.assertEqual(result.outcome, Outcome.REFUSED_OVERPAY)
        self.assertIn("10", result.error)
        self.assertEqual(merchant.rejection_count, 0)
        self.assertEqual(merchant.state, MerchantState.AWAITING_OFFER)
        self.assertEqual(player.gold, 100)

    def test_exact_price_accepted(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_FAIL))
        merchant = negotiating(MerchantVariant.RESERVED, 10)
        self.assertTrue(negotiator.submit_counter_offer(merchant, rich_player(), 10, turn=0).success)

    def test_discounted_offers(self) -> None:
        self.assertEqual(generate_offer(MerchantVariant.RESERVED, ScriptedRandom(index=0)).asking_price, 5)
        self.assertEqual(generate_offer(MerchantVariant.RESERVED, ScriptedRandom(index=1)).asking_price, 7)
        self.assertEqual(generate_offer(MerchantVariant.RESERVED, ScriptedRandom(index=4)).asking_price, 12)
        self.assertEqual(generate_offer(MerchantVariant.STANDARD, ScriptedRandom(index=4)), OFFER_POOL[4])


class TestPreconditions(unittest.TestCase):
    def test_invalid_offers_change_nothing(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_PASS))
        merchant = negotiating(MerchantVariant.STANDARD, 10)
        player = rich_player(gold=20)

        for bad in (0, -3, 2.5, "5", None, True):
            result = negotiator.submit_counter_offer(merchant, player, bad, turn=0)
            self.assertFalse(result.success, bad)
            self.assertIsNotNone(result.error)

        too_much = negotiator.submit_counter_offer(merchant, player, 21, turn=0)
        self.assertFalse(too_much.success)
        self.assertIn("20", too_much.error)

        self.assertEqual(merchant.rejection_count, 0)
        self.assertEqual(merchant.state, MerchantState.AWAITING_OFFER)
        self.assertEqual(player.gold, 20)

    def test_no_offer_yet(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom())
        result = negotiator.submit_counter_offer(Merchant(), rich_player(), 5, turn=0)
        self.assertFalse(result.success)
        self.assertFalse(result.trader_departed)


class TestAcceptCurrentOffer(unittest.TestCase):
    def test_twice_in_a_row(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom(ALWAYS_FAIL, index=2))
        merchant = negotiating(MerchantVariant.STANDARD, 10)
        player = rich_player(gold=30)

        first = negotiator.accept_current_offer(merchant, player)
        self.assertTrue(first.success)
        self.assertEqual(player.gold, 20)
        self.assertEqual(merchant.state, MerchantState.IDLE)
        self.assertEqual(merchant.offer, OFFER_POOL[2])

        second = negotiator.accept_current_offer(merchant, player)
        self.assertTrue(second.success)
        self.assertEqual(second.gold_paid, OFFER_POOL[2].asking_price)
        self.assertEqual(player.gold, 20 - OFFER_POOL[2].asking_price)
        self.assertEqual(player.water, 50 + OFFER_POOL[2].amount)
        self.assertEqual(merchant.rejection_count, 0)

    def test_not_enough_gold(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom())
        merchant = negotiating(MerchantVariant.STANDARD, 10)
        player = rich_player(gold=9)

        result = negotiator.accept_current_offer(merchant, player)
        self.assertFalse(result.success)
        self.assertEqual(player.gold, 9)
        self.assertEqual(merchant.state, MerchantState.AWAITING_OFFER)

    def test_life_offer(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom())
        merchant = Merchant(state=MerchantState.AWAITING_OFFER, offer=TradeOffer(TradeItem.LIFE, 1, 14))
        player = rich_player()

        result = negotiator.accept_current_offer(merchant, player)
        self.assertTrue(result.success)
        self.assertEqual(player.lives, 4)
        self.assertIn("Life", result.message)


class TestWalkAway(unittest.TestCase):
    def test_non_volatile_goes_idle(self) -> None:
        negotiator = TradeNegotiator(ScriptedRandom())
        for variant in (MerchantVariant.STANDARD, MerchantVariant.RESERVED):
            merchant = negotiating(variant, 10)
            result = negotiator.reject_current_offer(merchant, turn=0)
            self.assertTrue(result.success)
            self.assertFalse(result.trader_departed)
            self.assertEqual(merchant.state, MerchantState.IDLE)


class TestRandomDraws(unittest.TestCase):
    def test_only_chance_outcomes_consume_a_roll(self) -> None:
        cases = [
            (MerchantVariant.STANDARD, 10, 10, 0),
            (MerchantVariant.RESERVED, 10, 11, 0),
            (MerchantVariant.RESERVED, 10, 10, 0),
            (MerchantVariant.VOLATILE, 8, 4, 0),
            (MerchantVariant.VOLATILE, 8, 9, 0),
            (MerchantVariant.STANDARD, 10, 8, 1),
        ]
        for variant, asking, offered, expected in cases:
            rng = ScriptedRandom(ALWAYS_FAIL)
            TradeNegotiator(rng).submit_counter_offer(negotiating(variant, asking), rich_player(), offered, turn=1)
            self.assertEqual(rng.draws, expected, (variant, asking, offered))

    def test_transition_calls_roll_lazily(self) -> None:
        calls = []

        def roll() -> float:
            calls.append(1)
            return ALWAYS_PASS

        transition(MerchantVariant.STANDARD, MerchantState.AWAITING_OFFER, 0, 10, 12, roll, 0)
        self.assertEqual(calls, [])
        result = transition(MerchantVariant.STANDARD, MerchantState.AWAITING_OFFER, 0, 10, 9, roll, 0)
        self.assertEqual(calls, [1])
        self.assertEqual(result.outcome, Outcome.ACCEPTED)


class TestTradeResultSerialization(unittest.TestCase):
    def test_dict_form(self) -> None:
        result = TradeResult.ok("done", TradeOffer(TradeItem.WATER, 25, 6), gold_paid=6)
        data = result.to_dict()
        self.assertEqual(data["next_offer"], {"item": "water", "amount": 25, "asking_price": 6})
        self.assertEqual(data["outcome"], "accepted")
        self.assertEqual(TradeResult.from_dict(data), result)


if __name__ == "__main__":
    unittest.main()
