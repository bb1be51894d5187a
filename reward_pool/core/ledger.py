"""Token ledger and the gateway the pool moves value through."""
from abc import ABC, abstractmethod
from typing import Dict

from loguru import logger
from pydantic import BaseModel, Field, NonNegativeInt


class LedgerState(BaseModel):
    """Serializable snapshot of a token ledger."""
    symbol: str
    total_supply: NonNegativeInt
    balances: Dict[str, NonNegativeInt] = Field(default_factory=dict)
    allowances: Dict[str, Dict[str, NonNegativeInt]] = Field(default_factory=dict)


class TokenLedger:
    """In-memory fungible token with balances and spending allowances.

    Transfers never raise on ordinary failure; they return ``False`` and
    leave every balance untouched.
    """

    def __init__(self, symbol: str = "TKN", total_supply: int = 0, owner: str = ""):
        """Mint ``total_supply`` units to ``owner``.

        Args:
            symbol: Token ticker
            total_supply: Units minted at creation
            owner: Account receiving the initial supply
        """
        if total_supply < 0:
            raise ValueError(f"Total supply must not be negative, got {total_supply}")
        self.symbol = symbol
        self.total_supply = total_supply
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[str, Dict[str, int]] = {}
        if total_supply:
            self._balances[owner] = total_supply
            logger.debug(f"Minted {total_supply} {symbol} to {owner}")

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get(owner, {}).get(spender, 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Let ``spender`` move up to ``amount`` of ``owner``'s balance."""
        if amount < 0:
            return False
        self._allowances.setdefault(owner, {})[spender] = amount
        logger.debug(f"{owner} approved {spender} for {amount} {self.symbol}")
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient``."""
        if amount < 0 or self.balance_of(sender) < amount:
            return False
        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``owner`` to ``recipient`` using ``spender``'s allowance."""
        if amount < 0:
            return False
        allowed = self.allowance(owner, spender)
        if allowed < amount or self.balance_of(owner) < amount:
            return False
        self._allowances.setdefault(owner, {})[spender] = allowed - amount
        self._move(owner, recipient, amount)
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        logger.debug(f"Transferred {amount} {self.symbol} from {sender} to {recipient}")

    def to_state(self) -> LedgerState:
        return LedgerState(
            symbol=self.symbol,
            total_supply=self.total_supply,
            balances=dict(self._balances),
            allowances={owner: dict(spenders) for owner, spenders in self._allowances.items()},
        )

    @classmethod
    def from_state(cls, state: LedgerState) -> "TokenLedger":
        ledger = cls(symbol=state.symbol)
        ledger.total_supply = state.total_supply
        ledger._balances = dict(state.balances)
        ledger._allowances = {owner: dict(spenders) for owner, spenders in state.allowances.items()}
        return ledger


class LedgerGateway(ABC):
    """Moves value in and out of the pool's custody."""

    @abstractmethod
    def transfer_in(self, source: str, amount: int) -> bool:
        """Move ``amount`` from ``source`` into the pool. Returns success."""

    @abstractmethod
    def transfer_out(self, destination: str, amount: int) -> bool:
        """Move ``amount`` from the pool to ``destination``. Returns success."""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        """Read-only balance query."""


class TokenGateway(LedgerGateway):
    """Gateway backed by a ``TokenLedger``, acting as ``pool_address``.

    Deposits pull funds with ``transfer_from``, so the source must first
    approve ``pool_address``.
    """

    def __init__(self, ledger: TokenLedger, pool_address: str):
        self.ledger = ledger
        self.pool_address = pool_address

    def transfer_in(self, source: str, amount: int) -> bool:
        return self.ledger.transfer_from(self.pool_address, source, self.pool_address, amount)

    def transfer_out(self, destination: str, amount: int) -> bool:
        return self.ledger.transfer(self.pool_address, destination, amount)

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def custodied(self) -> int:
        """Balance currently held by the pool."""
        return self.ledger.balance_of(self.pool_address)
