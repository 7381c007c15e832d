"""Structured combat log record emitted when an encounter is finalized."""
from dataclasses import dataclass, field
from typing import Any, Optional

from ...core.data import ACTION_KIND_NAMES, CombatSide, ResolutionMode
from .round_executor import RoundResult


@dataclass
class SideSummary:
    """Before/after snapshot of one side of an encounter."""
    name: str
    hp_start: int
    hp_end: int
    weapon_name: Optional[str] = None
    uses_before: Optional[int] = None
    uses_after: Optional[int] = None
    uses_max: Optional[int] = None
    weapon_broken: bool = False

    def to_dict(self) -> dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class CombatLog:
    """Ordered rounds and final outcome of one encounter."""
    encounter_id: str
    mode: ResolutionMode
    attacker: SideSummary
    defender: SideSummary
    rounds: list[RoundResult] = field(default_factory=list)
    winner: Optional[str] = None

    @property
    def resolved_rounds(self) -> list[RoundResult]:
        return [r for r in self.rounds if r.resolved]

    @property
    def outcome(self) -> str:
        return self.winner if self.winner is not None else "ongoing"

    def side(self, side: CombatSide) -> SideSummary:
        return self.attacker if side is CombatSide.ATTACKER else self.defender

    def to_dict(self) -> dict[str, Any]:
        return {
            "encounter_id": self.encounter_id,
            "mode": self.mode.value,
            "attacker": self.attacker.to_dict(),
            "defender": self.defender.to_dict(),
            "rounds": [r.to_dict() for r in self.rounds],
            "winner": self.winner,
        }

    def format_lines(self) -> list[str]:
        """Plain-text rendering, one line per round plus a header and outcome."""
        lines = [
            f"{self.attacker.name} ({self.attacker.weapon_name or 'unarmed'}) vs "
            f"{self.defender.name} ({self.defender.weapon_name or 'unarmed'})"
        ]
        for r in self.rounds:
            label = ACTION_KIND_NAMES.get(r.kind, r.kind.value)
            if r.skipped:
                lines.append(f"  {r.index + 1}. {label}: {r.actor_name} - skipped")
                continue
            if not r.resolved:
                lines.append(f"  {r.index + 1}. {label}: {r.actor_name} - pending "
                             f"(hit {r.hit_chance}%, dmg {r.base_damage}, crit {r.crit_chance}%)")
                continue
            if not r.did_hit:
                result = f"miss (rolled {r.hit_roll} vs {r.hit_chance})"
            elif r.is_crit:
                result = f"CRITICAL! {r.damage} damage (rolled {r.hit_roll}, crit {r.crit_roll})"
            else:
                result = f"hit for {r.damage} (rolled {r.hit_roll}, crit {r.crit_roll})"
            lines.append(f"  {r.index + 1}. {label}: {r.actor_name} -> {r.target_name}: {result}, "
                         f"HP {r.hp_before} -> {r.hp_after}")

        for summary in (self.attacker, self.defender):
            line = f"  {summary.name}: HP {summary.hp_start} -> {summary.hp_end}"
            if summary.uses_max:
                line += f", {summary.weapon_name} {summary.uses_before} -> {summary.uses_after}/{summary.uses_max}"
            if summary.weapon_broken:
                line += " (broken)"
            lines.append(line)

        lines.append(f"Winner: {self.winner}" if self.winner else "No one was defeated")
        return lines
