"""Errors raised by the reward pool."""


class PoolError(Exception):
    """Base class for rejected pool operations."""


class InvalidAmount(PoolError):
    """A non-positive amount was supplied where a positive one is required."""


class PositionAlreadyOpen(PoolError):
    """Stake attempted while the participant still holds an open position."""


class NoActivePosition(PoolError):
    """Unstake attempted without an open position."""


class ExceedsStake(PoolError):
    """Unstake amount is greater than the participant's active stake."""


class NoParticipants(PoolError):
    """Distribute attempted while nothing is staked."""


class NotAuthorized(PoolError):
    """Caller does not hold the administrator capability."""


class TransferFailed(PoolError):
    """The ledger declined a requested transfer."""


class PoolStateError(Exception):
    """Persisted pool state could not be read."""
