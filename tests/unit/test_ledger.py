"""Unit tests for the token ledger and gateway."""
import pytest
from reward_pool.core.ledger import LedgerState, TokenGateway, TokenLedger


@pytest.fixture
def token():
    return TokenLedger("TKN", 1000, owner="owner")


def test_mint_to_owner(token):
    """Test the whole supply starts with the owner."""
    assert token.balance_of("owner") == 1000
    assert token.balance_of("alice") == 0
    assert token.total_supply == 1000


def test_negative_supply():
    with pytest.raises(ValueError):
        TokenLedger("TKN", -1, owner="owner")


def test_transfer(token):
    assert token.transfer("owner", "alice", 300)
    assert token.balance_of("owner") == 700
    assert token.balance_of("alice") == 300


def test_transfer_insufficient_balance(token):
    """Test a transfer larger than the balance is declined."""
    assert not token.transfer("alice", "owner", 1)
    assert not token.transfer("owner", "alice", 1001)
    assert not token.transfer("owner", "alice", -1)
    assert token.balance_of("owner") == 1000
    assert token.balance_of("alice") == 0


def test_transfer_to_self(token):
    assert token.transfer("owner", "owner", 400)
    assert token.balance_of("owner") == 1000


def test_transfer_from_uses_allowance(token):
    """Test transfer_from spends the approved allowance."""
    assert token.approve("owner", "pool", 500)
    assert token.allowance("owner", "pool") == 500

    assert token.transfer_from("pool", "owner", "pool", 200)
    assert token.allowance("owner", "pool") == 300
    assert token.balance_of("pool") == 200

    assert not token.transfer_from("pool", "owner", "pool", 301)
    assert token.allowance("owner", "pool") == 300
    assert token.balance_of("pool") == 200


def test_transfer_from_without_balance(token):
    """Test an allowance does not let a spender overdraw."""
    token.approve("alice", "pool", 100)
    assert not token.transfer_from("pool", "alice", "pool", 50)
    assert token.allowance("alice", "pool") == 100


def test_approve_negative(token):
    assert not token.approve("owner", "pool", -1)
    assert token.allowance("owner", "pool") == 0


def test_state_roundtrip(token):
    """Test a ledger rebuilt from its state keeps balances and allowances."""
    token.transfer("owner", "alice", 250)
    token.approve("alice", "pool", 100)

    state = token.to_state()
    assert isinstance(state, LedgerState)
    restored = TokenLedger.from_state(LedgerState(**state.model_dump()))

    assert restored.symbol == "TKN"
    assert restored.total_supply == 1000
    assert restored.balance_of("alice") == 250
    assert restored.allowance("alice", "pool") == 100


def test_gateway(token):
    """Test the gateway moves value in and out of the pool address."""
    gateway = TokenGateway(token, "pool")
    token.approve("owner", "pool", 100)

    assert gateway.transfer_in("owner", 100)
    assert gateway.custodied() == 100
    assert not gateway.transfer_in("owner", 1)

    assert gateway.transfer_out("alice", 60)
    assert gateway.balance_of("alice") == 60
    assert gateway.custodied() == 40
    assert not gateway.transfer_out("alice", 41)
