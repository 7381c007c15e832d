"""Exception hierarchy for the combat engine.

Defeat is not represented here: a combatant reaching 0 HP is a normal
terminal condition of an encounter, handled by the combat session.
"""


class EmblemError(Exception):
    """Base class for all combat engine errors."""


class PreconditionError(EmblemError):
    """An encounter or operation cannot start because its inputs are invalid.

    Raised before any state is mutated, e.g. when the attacker has no usable
    weapon equipped.
    """


class InvalidStateError(EmblemError):
    """An operation was requested in a state that does not allow it.

    Examples are resolving an already-resolved round or stepping a session
    that no longer exists. Callers report these as warnings.
    """


class RangeParseError(EmblemError, ValueError):
    """A weapon range string does not match ``N`` or ``N-M``."""

    def __init__(self, range_str: object):
        super().__init__(f"Invalid weapon range: {range_str!r} (expected 'N' or 'N-M')")
        self.range_str = range_str


class ConfigError(EmblemError, ValueError):
    """Combat settings contain an unsupported value."""
