"""Reward Pool CLI."""
import os
import sys
from contextlib import contextmanager
from typing import Optional

import click
from loguru import logger

from .core.config import PoolConfig, get_state_dir
from .core.errors import PoolError, PoolStateError
from .core.events import event_to_dict
from .core.ledger import TokenGateway
from .core.pool import RewardPool
from .core.store import PoolStore, deploy as deploy_pool


def configure_logging() -> None:
    """Send log output to stderr at REWARD_POOL_LOG_LEVEL (default WARNING)."""
    logger.remove()
    logger.add(sys.stderr, level=os.getenv("REWARD_POOL_LOG_LEVEL", "WARNING").upper())


def load_pool(store: PoolStore) -> RewardPool:
    """Load the deployed pool or abort the command."""
    try:
        pool = store.load()
    except PoolStateError as e:
        raise click.ClickException(str(e))
    if pool is None:
        raise click.ClickException(f"No pool deployed in {store.state_dir}. Run 'reward-pool deploy' first.")
    return pool


@contextmanager
def pool_transaction(store: PoolStore):
    """Yield the loaded pool and save it only if the block succeeds."""
    pool = load_pool(store)
    try:
        yield pool
    except PoolError as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")
    store.save(pool)


def gateway_of(pool: RewardPool) -> TokenGateway:
    """The token gateway behind a loaded pool."""
    if not isinstance(pool.gateway, TokenGateway):
        raise click.ClickException(f"Pool is not backed by a token ledger: {pool.gateway!r}")
    return pool.gateway


@click.group()
@click.version_option(package_name="reward-pool")
@click.option('--home', type=click.Path(file_okay=False), help='State directory (defaults to $REWARD_POOL_HOME)')
@click.pass_context
def cli(ctx, home: Optional[str]):
    """Reward Pool - stake, distribute and withdraw proportional rewards"""
    configure_logging()
    ctx.obj = PoolStore(get_state_dir(home))


@cli.command()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False), help='YAML deployment config')
@click.option('--admin', help='Administrator identity (receives the token supply)')
@click.option('--supply', type=int, help='Token units minted at deployment')
@click.option('--force', is_flag=True, help='Overwrite an existing deployment')
@click.pass_obj
def deploy(store: PoolStore, config_path: Optional[str], admin: Optional[str], supply: Optional[int], force: bool):
    """Deploy a token and an empty reward pool."""
    if store.exists() and not force:
        raise click.ClickException(f"A pool is already deployed in {store.state_dir}. Use --force to replace it.")

    config = PoolConfig.from_yaml(config_path) if config_path else PoolConfig()
    overrides = {}
    if admin:
        overrides["admin"] = admin
    if supply is not None:
        overrides["total_supply"] = supply
    if overrides:
        try:
            config = PoolConfig(**{**config.model_dump(), **overrides})
        except ValueError as e:
            raise click.ClickException(str(e))

    _, pool = deploy_pool(config)
    store.save(pool)
    click.echo(f"Token {config.token_symbol} deployed with supply {config.total_supply} held by {config.admin}")
    click.echo(f"Pool deployed at {config.pool_address}")


@cli.command()
@click.pass_obj
def status(store: PoolStore):
    """Show pool totals."""
    pool = load_pool(store)
    gateway = gateway_of(pool)
    custodied = gateway.custodied()

    click.echo("\nPool Status:")
    click.echo("-" * 60)
    click.echo(f"Address: {gateway.pool_address}")
    click.echo(f"Administrator: {pool.admin}")
    click.echo(f"Total Staked: {pool.total_active_stake}")
    click.echo(f"Pool Balance: {custodied} {gateway.ledger.symbol}")
    click.echo(f"Undistributed: {custodied - pool.total_active_stake}")
    click.echo(f"Accumulator: {pool.accumulator} (scale {pool.scale})")


@cli.command()
@click.argument('participant')
@click.pass_obj
def holder(store: PoolStore, participant: str):
    """Show a participant's position."""
    pool = load_pool(store)
    record = pool.stake_holder(participant)
    click.echo(f"\nPosition for {participant}:")
    click.echo("-" * 60)
    click.echo(f"Stake: {record.active_stake}")
    click.echo(f"Snapshot: {record.settled_at}")
    click.echo(f"Pending Reward: {pool.pending_reward(participant)}")


@cli.command()
@click.argument('participant')
@click.argument('amount', type=int)
@click.pass_obj
def stake(store: PoolStore, participant: str, amount: int):
    """Stake AMOUNT units for PARTICIPANT."""
    with pool_transaction(store) as pool:
        pool.stake(participant, amount)
    click.echo(f"Staked {amount} for {participant}")


@cli.command()
@click.argument('participant')
@click.option('--amount', type=int, help='Principal to withdraw (default: everything)')
@click.pass_obj
def unstake(store: PoolStore, participant: str, amount: Optional[int]):
    """Withdraw stake and collect the accrued reward."""
    with pool_transaction(store) as pool:
        payout = pool.unstake(participant, amount)
    click.echo(f"Paid {payout} to {participant}")


@cli.command()
@click.argument('amount', type=int)
@click.option('--caller', help='Calling identity (default: the administrator)')
@click.pass_obj
def distribute(store: PoolStore, amount: int, caller: Optional[str]):
    """Distribute AMOUNT units over current stakers."""
    with pool_transaction(store) as pool:
        pool.distribute(caller or pool.admin, amount)
    click.echo(f"Distributed {amount}")


@cli.command()
@click.option('--limit', default=20, help='Number of events to show')
@click.pass_obj
def events(store: PoolStore, limit: int):
    """Show the most recent pool events."""
    pool = load_pool(store)
    recent = pool.events[-limit:] if limit > 0 else []
    if not recent:
        click.echo("No events")
        return
    for event in recent:
        data = event_to_dict(event)
        name = data.pop("event")
        args = ", ".join(f"{k}={v}" for k, v in data.items())
        click.echo(f"{name}({args})")


@cli.group()
def token():
    """Token balances and transfers."""
    pass


@token.command()
@click.argument('account')
@click.pass_obj
def balance(store: PoolStore, account: str):
    """Show ACCOUNT's token balance."""
    gateway = gateway_of(load_pool(store))
    click.echo(f"Balance: {gateway.balance_of(account)} {gateway.ledger.symbol}")


@token.command()
@click.argument('sender')
@click.argument('recipient')
@click.argument('amount', type=int)
@click.pass_obj
def transfer(store: PoolStore, sender: str, recipient: str, amount: int):
    """Transfer AMOUNT from SENDER to RECIPIENT."""
    pool = load_pool(store)
    if not gateway_of(pool).ledger.transfer(sender, recipient, amount):
        raise click.ClickException(f"Transfer of {amount} from {sender} to {recipient} was declined")
    store.save(pool)
    click.echo(f"Transferred {amount} from {sender} to {recipient}")


@token.command()
@click.argument('owner')
@click.argument('amount', type=int)
@click.option('--spender', help='Approved spender (default: the pool)')
@click.pass_obj
def approve(store: PoolStore, owner: str, amount: int, spender: Optional[str]):
    """Allow the pool to pull up to AMOUNT from OWNER."""
    pool = load_pool(store)
    gateway = gateway_of(pool)
    spender = spender or gateway.pool_address
    if not gateway.ledger.approve(owner, spender, amount):
        raise click.ClickException(f"Approval of {amount} for {spender} was declined")
    store.save(pool)
    click.echo(f"{owner} approved {spender} for {amount}")


if __name__ == "__main__":
    cli()
