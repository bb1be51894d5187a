"""Fixed-point reward-per-stake arithmetic.

The pool tracks a single accumulator: the cumulative reward paid per unit of
stake since inception, stored as an integer scaled by ``SCALE``. A reward of
``R`` over ``T`` staked units advances it by ``R * SCALE // T``; a position of
``S`` units settled at snapshot ``s`` is owed ``S * (acc - s) // SCALE``.

Both divisions floor, so the pool may keep a small residual but never pays
out more than it received.
"""
from .errors import InvalidAmount, NoParticipants

SCALE = 10 ** 18


def accumulator_delta(reward: int, total_stake: int, scale: int = SCALE) -> int:
    """Accumulator increase for distributing ``reward`` over ``total_stake`` units.

    Raises:
        NoParticipants: If ``total_stake`` is not positive
        InvalidAmount: If ``reward`` is negative
    """
    if total_stake <= 0:
        raise NoParticipants("Nothing is staked")
    if reward < 0:
        raise InvalidAmount(f"Reward must not be negative, got {reward}")
    return reward * scale // total_stake


def owed_reward(stake: int, accumulator_now: int, settled_at: int, scale: int = SCALE) -> int:
    """Reward accrued by ``stake`` units since the snapshot ``settled_at``."""
    if settled_at > accumulator_now:
        raise ValueError(f"Snapshot {settled_at} is ahead of accumulator {accumulator_now}")
    return stake * (accumulator_now - settled_at) // scale


class FixedPointAccumulator:
    """Monotonically non-decreasing reward-per-stake counter."""

    def __init__(self, value: int = 0, scale: int = SCALE):
        if value < 0:
            raise ValueError(f"Accumulator value must not be negative, got {value}")
        if scale <= 0:
            raise ValueError(f"Scale must be positive, got {scale}")
        self.value = value
        self.scale = scale

    def delta(self, reward: int, total_stake: int) -> int:
        return accumulator_delta(reward, total_stake, self.scale)

    def advance(self, reward: int, total_stake: int) -> int:
        """Spread ``reward`` over ``total_stake`` units.

        Args:
            reward: Amount being distributed
            total_stake: Total active stake at this instant

        Returns:
            The new accumulator value
        """
        self.value += self.delta(reward, total_stake)
        return self.value

    def owed(self, stake: int, settled_at: int) -> int:
        return owed_reward(stake, self.value, settled_at, self.scale)

    def __repr__(self) -> str:
        return f"FixedPointAccumulator(value={self.value}, scale={self.scale})"
