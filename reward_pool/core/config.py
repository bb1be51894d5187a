"""Pool configuration and state directory lookup."""
import os
import platform
from pathlib import Path
from typing import Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, field_validator

from .accumulator import SCALE

DEFAULT_TOTAL_SUPPLY = 1_000_000 * 10 ** 18


class PoolConfig(BaseModel):
    """Deployment settings for a pool and its token."""
    admin: str = "admin"
    pool_address: str = "reward-pool"
    token_symbol: str = "TKN"
    total_supply: int = DEFAULT_TOTAL_SUPPLY
    scale: int = SCALE

    @field_validator("total_supply")
    @classmethod
    def _supply_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("total_supply must not be negative")
        return value

    @field_validator("scale")
    @classmethod
    def _scale_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("scale must be positive")
        return value

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PoolConfig":
        """Load settings from a YAML file; missing keys keep their defaults."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        logger.debug(f"Loaded pool config from {path}")
        return cls(**data)


def get_state_dir(home: Optional[Union[str, Path]] = None) -> Path:
    """Directory holding the persisted pool state."""
    if home:
        return Path(home)
    env_home = os.getenv("REWARD_POOL_HOME")
    if env_home:
        return Path(env_home)
    if os.name == 'nt':  # Windows
        return Path(os.getenv('APPDATA')) / 'reward-pool'
    elif platform.system() == 'Darwin':  # macOS
        return Path.home() / 'Library' / 'Application Support' / 'reward-pool'
    else:  # Linux and others
        return Path.home() / '.config' / 'reward-pool'
