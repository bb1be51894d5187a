"""Core reward accounting for the pool."""
from .accumulator import SCALE, FixedPointAccumulator, accumulator_delta, owed_reward
from .config import PoolConfig, get_state_dir
from .errors import (
    ExceedsStake,
    InvalidAmount,
    NoActivePosition,
    NoParticipants,
    NotAuthorized,
    PoolError,
    PoolStateError,
    PositionAlreadyOpen,
    TransferFailed,
)
from .events import Distributed, Staked, Unstaked
from .ledger import LedgerGateway, TokenGateway, TokenLedger
from .pool import ParticipantRecord, RewardPool
from .store import PoolStore, deploy

__all__ = [
    "SCALE",
    "FixedPointAccumulator",
    "accumulator_delta",
    "owed_reward",
    "PoolConfig",
    "get_state_dir",
    "PoolError",
    "PoolStateError",
    "InvalidAmount",
    "PositionAlreadyOpen",
    "NoActivePosition",
    "ExceedsStake",
    "NoParticipants",
    "NotAuthorized",
    "TransferFailed",
    "Staked",
    "Unstaked",
    "Distributed",
    "LedgerGateway",
    "TokenGateway",
    "TokenLedger",
    "ParticipantRecord",
    "RewardPool",
    "PoolStore",
    "deploy",
]
