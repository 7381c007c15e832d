"""
Unit tests for dice and round execution.
"""

import pytest

from emblem.core.data import ActionKind, CombatSide
from emblem.game.combat import Dice, RoundExecutor, RoundOdds, RoundResult, SequenceBuilder


@pytest.fixture
def opening_action(duelists):
    """The attacker's first blow against the defender (82 hit, 1 crit, 11 damage)."""
    attacker, defender = duelists
    return SequenceBuilder().build_sequence(attacker, defender)[0]


class TestDice:
    """d100 rolls are recorded with labels."""

    def test_seeded_dice_repeat(self):
        first, second = Dice(seed=7), Dice(seed=7)
        assert [first.roll_d100() for _ in range(5)] == [second.roll_d100() for _ in range(5)]

    def test_rolls_in_range(self):
        dice = Dice(seed=1)
        rolls = [dice.roll_d100() for _ in range(500)]
        assert min(rolls) >= 1
        assert max(rolls) <= 100

    def test_history(self):
        dice = Dice(seed=3)
        value = dice.roll_d100("probe")

        assert dice.history[-1].label == "probe"
        assert dice.history[-1].value == value
        dice.clear_history()
        assert dice.history == []

    def test_scripted_dice(self, scripted_dice):
        dice = scripted_dice([10, 100])
        assert dice.remaining == 2
        assert dice.roll_d100() == 10
        assert dice.roll_d100() == 100
        with pytest.raises(IndexError):
            dice.roll_d100()

    @pytest.mark.parametrize("value", [0, 101])
    def test_scripted_dice_rejects_out_of_range(self, scripted_dice, value):
        with pytest.raises(ValueError):
            scripted_dice([value])


class TestRoundExecutor:
    """Hit and crit rolls against the odds snapshot."""

    def test_stub_snapshots_odds(self, opening_action):
        stub = RoundResult.stub(0, opening_action, hp_before=20)

        assert stub.is_pending
        assert stub.side is CombatSide.ATTACKER
        assert stub.kind is ActionKind.ATTACK
        assert stub.odds == RoundOdds(82, 1, 11)
        assert stub.hp_after == 20
        assert stub.hit_roll is None

    def test_hit(self, opening_action, scripted_dice):
        dice = scripted_dice([82, 50])
        result = RoundExecutor(dice).execute(opening_action, current_defender_hp=20)

        assert result.resolved
        assert result.did_hit
        assert not result.is_crit
        assert result.damage == 11
        assert result.hp_after == 9
        assert [record.label for record in dice.history] == ["round 0 hit", "round 0 crit"]

    def test_miss_skips_crit_roll(self, opening_action, scripted_dice):
        dice = scripted_dice([83])
        result = RoundExecutor(dice).execute(opening_action, current_defender_hp=20, index=3)

        assert not result.did_hit
        assert result.hit_roll == 83
        assert result.crit_roll is None
        assert result.damage == 0
        assert result.hp_after == 20
        assert dice.remaining == 0

    def test_crit_triples_damage(self, opening_action, scripted_dice):
        result = RoundExecutor(scripted_dice([1, 1])).execute(opening_action, current_defender_hp=20)

        assert result.is_crit
        assert result.damage == 33
        assert result.hp_after == 0

    def test_hp_floor(self, opening_action, scripted_dice):
        result = RoundExecutor(scripted_dice([1, 99])).execute(opening_action, current_defender_hp=5)
        assert result.hp_after == 0

    def test_resolve_uses_snapshot_not_live_stats(self, opening_action, scripted_dice):
        stub = RoundResult.stub(0, opening_action, hp_before=20)
        opening_action.actor.stats.str.value = 30

        RoundExecutor(scripted_dice([1, 99])).resolve(stub)
        assert stub.damage == 11

    def test_round_dict_round_trip(self, opening_action, scripted_dice):
        result = RoundExecutor(scripted_dice([5, 99])).execute(opening_action, current_defender_hp=20)
        data = result.to_dict()

        assert data["side"] == "attacker"
        assert data["kind"] == "attack"
        assert RoundResult.from_dict(data) == result

    def test_crit_damage_property(self):
        assert RoundOdds(90, 10, 7).crit_damage == 21
