"""Proportional reward pool.

Participants stake into a shared pool and the administrator distributes
rewards over whoever is staked at that moment. Distribution only advances a
global accumulator, so every operation costs the same regardless of how many
participants there are. Each participant's share is settled lazily the next
time they unstake.
"""
from typing import Callable, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from .accumulator import SCALE, FixedPointAccumulator
from .errors import (
    ExceedsStake,
    InvalidAmount,
    NoActivePosition,
    NoParticipants,
    NotAuthorized,
    PositionAlreadyOpen,
    TransferFailed,
)
from .events import Distributed, PoolEvent, Staked, Unstaked, event_from_dict, event_to_dict
from .ledger import LedgerGateway


class ParticipantRecord(BaseModel):
    """A participant's open position."""
    active_stake: int = Field(default=0, ge=0)
    settled_at: int = Field(default=0, ge=0)  # accumulator value at last settlement

    @property
    def is_open(self) -> bool:
        return self.active_stake != 0


class PoolState(BaseModel):
    """Serializable snapshot of a reward pool."""
    admin: str
    scale: int = Field(default=SCALE, gt=0)
    accumulator: int = Field(default=0, ge=0)
    total_active_stake: int = Field(default=0, ge=0)
    holders: Dict[str, ParticipantRecord] = Field(default_factory=dict)
    events: List[dict] = Field(default_factory=list)


EventListener = Callable[[PoolEvent], None]


def _is_amount(value) -> bool:
    # bool is an int subclass but never a token amount
    return isinstance(value, int) and not isinstance(value, bool)


class RewardPool:
    """Stake, unstake and distribute with O(1) reward accounting.

    Every public operation validates first, then asks the gateway to move
    value, and only mutates local state once the transfer has succeeded. A
    rejected call leaves the pool exactly as it was.
    """

    def __init__(self, gateway: LedgerGateway, admin: str, scale: int = SCALE):
        """Initialize an empty pool.

        Args:
            gateway: Ledger gateway holding the pool's custody
            admin: Identity allowed to distribute rewards
            scale: Fixed-point scale of the accumulator
        """
        self.gateway = gateway
        self.admin = admin
        self._accumulator = FixedPointAccumulator(scale=scale)
        self._total_active_stake = 0
        self._holders: Dict[str, ParticipantRecord] = {}
        self.events: List[PoolEvent] = []
        self._listeners: List[EventListener] = []

    @property
    def accumulator(self) -> int:
        return self._accumulator.value

    @property
    def scale(self) -> int:
        return self._accumulator.scale

    @property
    def total_active_stake(self) -> int:
        return self._total_active_stake

    def subscribe(self, listener: EventListener) -> None:
        """Call ``listener`` with every event emitted from now on."""
        self._listeners.append(listener)

    def _record(self, participant: str) -> ParticipantRecord:
        # Records are created on first access and never removed
        record = self._holders.get(participant)
        if record is None:
            record = self._holders[participant] = ParticipantRecord()
        return record

    def _emit(self, event: PoolEvent) -> None:
        self.events.append(event)
        # Listeners run after commit and cannot fail the operation
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Event listener {listener!r} failed on {event}")

    def stake_holder(self, participant: str) -> ParticipantRecord:
        """Copy of the participant's record (zeroed if never seen)."""
        record = self._holders.get(participant)
        return record.model_copy() if record else ParticipantRecord()

    def pending_reward(self, participant: str) -> int:
        """Reward an unstake would pay ``participant`` right now."""
        record = self._holders.get(participant)
        if record is None:
            return 0
        return self._accumulator.owed(record.active_stake, record.settled_at)

    def stake(self, participant: str, amount: int) -> None:
        """Open a position of ``amount`` units for ``participant``.

        Raises:
            InvalidAmount: If ``amount`` is not positive
            PositionAlreadyOpen: If the participant already has stake
            TransferFailed: If the deposit is declined
        """
        if not _is_amount(amount) or amount <= 0:
            raise InvalidAmount(f"Stake amount must be positive, got {amount}")
        record = self._holders.get(participant)
        if record is not None and record.is_open:
            raise PositionAlreadyOpen(f"{participant} already has {record.active_stake} staked")
        if not self.gateway.transfer_in(participant, amount):
            raise TransferFailed(f"Deposit of {amount} from {participant} was declined")

        record = self._record(participant)
        record.active_stake = amount
        record.settled_at = self._accumulator.value
        self._total_active_stake += amount
        logger.info(f"{participant} staked {amount} (total {self._total_active_stake})")
        self._emit(Staked(participant, amount))

    def unstake(self, participant: str, amount: Optional[int] = None) -> int:
        """Withdraw ``amount`` units and settle the whole accrued reward.

        The reward owed on the full active stake is paid out with the
        principal, and the remaining stake starts accruing from now.

        Args:
            participant: Participant withdrawing
            amount: Principal to withdraw; ``None`` withdraws everything

        Returns:
            Total payout (principal plus reward)

        Raises:
            NoActivePosition: If the participant has nothing staked
            InvalidAmount: If ``amount`` is not positive
            ExceedsStake: If ``amount`` is more than the active stake
            TransferFailed: If the pool cannot pay out
        """
        record = self._holders.get(participant)
        if record is None or not record.is_open:
            raise NoActivePosition(f"{participant} has no active position")
        if amount is None:
            amount = record.active_stake
        if not _is_amount(amount) or amount <= 0:
            raise InvalidAmount(f"Unstake amount must be positive, got {amount}")
        if amount > record.active_stake:
            raise ExceedsStake(f"{participant} has {record.active_stake} staked, cannot withdraw {amount}")

        reward = self._accumulator.owed(record.active_stake, record.settled_at)
        payout = amount + reward
        if not self.gateway.transfer_out(participant, payout):
            raise TransferFailed(f"Payout of {payout} to {participant} was declined")

        record.active_stake -= amount
        record.settled_at = self._accumulator.value
        self._total_active_stake -= amount
        logger.info(f"{participant} unstaked {amount} with reward {reward} (total {self._total_active_stake})")
        self._emit(Unstaked(participant, payout))
        return payout

    def distribute(self, caller: str, amount: int) -> None:
        """Spread ``amount`` over everyone currently staked.

        Touches no participant record. A zero amount is accepted and leaves
        the accumulator unchanged.

        Raises:
            NotAuthorized: If ``caller`` is not the administrator
            InvalidAmount: If ``amount`` is negative
            NoParticipants: If nothing is staked
            TransferFailed: If the reward deposit is declined
        """
        if caller != self.admin:
            raise NotAuthorized(f"{caller} is not the pool administrator")
        if not _is_amount(amount) or amount < 0:
            raise InvalidAmount(f"Reward must not be negative, got {amount}")
        if self._total_active_stake == 0:
            raise NoParticipants("Cannot distribute with nothing staked")
        delta = self._accumulator.delta(amount, self._total_active_stake)
        if not self.gateway.transfer_in(caller, amount):
            raise TransferFailed(f"Reward deposit of {amount} from {caller} was declined")

        self._accumulator.value += delta
        logger.info(f"Distributed {amount} over {self._total_active_stake} staked (accumulator {self._accumulator.value})")
        self._emit(Distributed(amount))

    def to_state(self) -> PoolState:
        return PoolState(
            admin=self.admin,
            scale=self.scale,
            accumulator=self.accumulator,
            total_active_stake=self._total_active_stake,
            holders={k: v.model_copy() for k, v in self._holders.items()},
            events=[event_to_dict(e) for e in self.events],
        )

    @classmethod
    def from_state(cls, state: PoolState, gateway: LedgerGateway) -> "RewardPool":
        pool = cls(gateway, admin=state.admin, scale=state.scale)
        pool._accumulator.value = state.accumulator
        pool._total_active_stake = state.total_active_stake
        pool._holders = {k: v.model_copy() for k, v in state.holders.items()}
        pool.events = [event_from_dict(e) for e in state.events]
        return pool
