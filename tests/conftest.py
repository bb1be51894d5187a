"""Test configuration and fixtures for Reward Pool."""
import os
import pytest
from reward_pool.core.ledger import TokenGateway, TokenLedger
from reward_pool.core.pool import RewardPool

POOL_ADDRESS = "reward-pool"
TOTAL_SUPPLY = 10 ** 21
ALICE_BALANCE = 1_000_000
BOB_BALANCE = 1000
CAROL_BALANCE = 1000


@pytest.fixture
def ledger():
    """Token ledger with balances handed out and the pool approved."""
    ledger = TokenLedger("TKN", TOTAL_SUPPLY, owner="owner")
    for account, balance in (("alice", ALICE_BALANCE), ("bob", BOB_BALANCE), ("carol", CAROL_BALANCE)):
        assert ledger.transfer("owner", account, balance)
        assert ledger.approve(account, POOL_ADDRESS, balance)
    assert ledger.approve("owner", POOL_ADDRESS, TOTAL_SUPPLY)
    return ledger


@pytest.fixture
def gateway(ledger):
    return TokenGateway(ledger, POOL_ADDRESS)


@pytest.fixture
def pool(gateway):
    """Empty pool administered by ``owner``."""
    return RewardPool(gateway, admin="owner")


@pytest.fixture
def pool_home(tmp_path, monkeypatch):
    """Point the CLI at a temporary state directory."""
    monkeypatch.setenv("REWARD_POOL_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def env_setup():
    """Set up environment variables for testing."""
    os.environ["REWARD_POOL_LOG_LEVEL"] = "DEBUG"
    yield
    del os.environ["REWARD_POOL_LOG_LEVEL"]
