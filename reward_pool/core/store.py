"""Deployment and on-disk persistence of a pool and its token ledger."""
import json
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ValidationError

from .config import PoolConfig
from .errors import PoolStateError
from .ledger import LedgerState, TokenGateway, TokenLedger
from .pool import PoolState, RewardPool

STATE_FILE = "pool_state.json"


class Deployment(BaseModel):
    """Everything needed to rebuild a deployed pool."""
    pool_address: str
    ledger: LedgerState
    pool: PoolState


def deploy(config: PoolConfig) -> Tuple[TokenLedger, RewardPool]:
    """Mint the token supply to the administrator and create an empty pool."""
    ledger = TokenLedger(config.token_symbol, config.total_supply, owner=config.admin)
    pool = RewardPool(TokenGateway(ledger, config.pool_address), admin=config.admin, scale=config.scale)
    logger.info(f"Deployed {config.token_symbol} with supply {config.total_supply} and pool {config.pool_address}")
    return ledger, pool


class PoolStore:
    """Saves and loads a deployment as a single JSON document."""

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)
        self.path = self.state_dir / STATE_FILE

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, pool: RewardPool) -> None:
        """Write the pool and the ledger behind its gateway."""
        gateway = pool.gateway
        if not isinstance(gateway, TokenGateway):
            raise TypeError("Only pools backed by a TokenGateway can be saved")
        deployment = Deployment(
            pool_address=gateway.pool_address,
            ledger=gateway.ledger.to_state(),
            pool=pool.to_state(),
        )
        self.state_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, 'w') as f:
            json.dump(deployment.model_dump(), f, indent=2)
        tmp_path.replace(self.path)
        logger.debug(f"Saved pool state to {self.path}")

    def load(self) -> Optional[RewardPool]:
        """Rebuild the saved pool, or ``None`` if nothing was deployed.

        Raises:
            PoolStateError: If the file is corrupt or inconsistent
        """
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                deployment = Deployment.model_validate(json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            raise PoolStateError(f"Corrupt pool state in {self.path}: {e}") from e

        staked = sum(r.active_stake for r in deployment.pool.holders.values())
        if staked != deployment.pool.total_active_stake:
            raise PoolStateError(
                f"Inconsistent pool state in {self.path}: records hold {staked}, "
                f"total is {deployment.pool.total_active_stake}"
            )
        ahead = [name for name, r in deployment.pool.holders.items() if r.settled_at > deployment.pool.accumulator]
        if ahead:
            raise PoolStateError(
                f"Inconsistent pool state in {self.path}: snapshots of {', '.join(sorted(ahead))} "
                f"are ahead of accumulator {deployment.pool.accumulator}"
            )
        ledger = TokenLedger.from_state(deployment.ledger)
        gateway = TokenGateway(ledger, deployment.pool_address)
        try:
            return RewardPool.from_state(deployment.pool, gateway)
        except (TypeError, ValueError) as e:
            raise PoolStateError(f"Corrupt pool state in {self.path}: {e}") from e
