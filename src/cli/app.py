"""Typer CLI application for the delta hedger."""

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import RebalancingConfig, get_config
from src.core.errors import HedgerError
from src.core.events import EventType
from src.core.fixed_point import collateral_for_size, parse_fixed, to_decimal, usd_value
from src.logging_config import configure_logging, logging_config_from_settings
from src.rebalancing.engine import RebalanceAction, RebalanceOutcome, decide

app = typer.Typer(
    name="hedger",
    help="Delta-neutral short hedge for liquidity pool exposure",
    add_completion=False,
)

console = Console()


def _usd(value: int) -> str:
    """Format a USD fixed-point amount."""
    return f"${to_decimal(value):,.2f}"


@app.callback()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging before any command runs."""
    log_config = logging_config_from_settings(get_config())
    if verbose:
        log_config.level = "DEBUG"
    configure_logging(log_config)


@app.command("show-config")
def show_config():
    """Show the effective configuration."""
    config = get_config()

    table = Table(title="Hedger Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Owner", config.owner)
    table.add_row("Account", config.account)
    table.add_row("Market", config.market.market)
    table.add_row("Base asset", f"{config.market.base_asset} ({config.market.base_decimals} dp)")
    table.add_row("Collateral asset", config.market.collateral_asset)
    table.add_row("Fee asset", config.market.fee_asset)
    table.add_row("Threshold", _usd(config.rebalancing.threshold))
    table.add_row("Execution fee", str(config.rebalancing.execution_fee))
    table.add_row(
        "Rebalancing",
        "[red]Paused[/red]" if config.rebalancing.skip_rebalancing else "[green]Active[/green]",
    )
    table.add_row("Strict single position", str(config.rebalancing.strict_single_position))
    table.add_row("Price feed", config.oracle.base_url or "[dim]not set[/dim]")

    console.print(table)


@app.command()
def size(
    quantity: str = typer.Argument(..., help="Exposure in base units (e.g. 100e18)"),
    price: str = typer.Argument(..., help="Price in USD fixed point (e.g. 1800e30)"),
    decimals: int = typer.Option(18, "--decimals", "-d", help="Base asset decimals"),
    current: str = typer.Option("0", "--current", "-c", help="Open short size, USD fixed point"),
    threshold: str = typer.Option("100e30", "--threshold", "-t", help="Threshold, USD fixed point"),
):
    """Preview the sizing decision for an exposure and price."""
    try:
        qty = parse_fixed(quantity)
        px = parse_fixed(price)
        current_usd = parse_fixed(current)
        band = parse_fixed(threshold)
        desired = usd_value(qty, px, decimals)
    except (ValueError, ArithmeticError) as e:
        console.print(f"[red]Invalid input: {e}[/red]")
        raise typer.Exit(1)

    delta = desired - current_usd
    action, magnitude = decide(delta, band)

    lines = [
        f"Desired short: {_usd(desired)}  [dim]({desired})[/dim]",
        f"Current short: {_usd(current_usd)}",
        f"Delta:         {_usd(delta)}  [dim]({delta})[/dim]",
        f"Threshold:     ±{_usd(band)}",
        f"Action:        [bold]{action.value.upper()}[/bold]",
    ]
    if action != RebalanceAction.SKIP:
        lines.append(f"Size delta:    {magnitude}")
    if action == RebalanceAction.INCREASE:
        lines.append(f"Collateral:    {collateral_for_size(magnitude)}")

    console.print(Panel("\n".join(lines), title="Rebalance Preview"))


@app.command()
def simulate(
    delta: List[str] = typer.Option(
        ..., "--delta", help="Signed exposure change in base units; repeat for a sequence"
    ),
    pool: Optional[str] = typer.Option(
        None, "--pool", help="Pool identity (defaults to the configured pool)"
    ),
    price: str = typer.Option("1800e30", "--price", "-p", help="Base price, USD fixed point"),
    collateral: str = typer.Option("1e9", "--collateral", help="Collateral balance to fund"),
    fee_balance: str = typer.Option("1e18", "--fee-balance", help="Fee-currency balance to fund"),
    threshold: Optional[str] = typer.Option(None, "--threshold", "-t", help="Override threshold"),
    execution_fee: Optional[str] = typer.Option(None, "--execution-fee", help="Override execution fee"),
):
    """Run a sequence of exposure changes against an in-memory venue."""
    from src.main import build_hedger
    from src.venue.simulated import InMemoryCustody, SimulatedVenue, StaticPriceFeed

    base = get_config()
    try:
        deltas = [parse_fixed(d) for d in delta]
        px = parse_fixed(price)
        funding = parse_fixed(collateral)
        fee_funding = parse_fixed(fee_balance)
        overrides = {}
        if threshold is not None:
            overrides["threshold"] = parse_fixed(threshold)
        if execution_fee is not None:
            overrides["execution_fee"] = parse_fixed(execution_fee)
        rebalancing = RebalancingConfig.model_validate(
            {**base.rebalancing.model_dump(), **overrides}
        )
    except (ValueError, ArithmeticError) as e:
        console.print(f"[red]Invalid input: {e}[/red]")
        raise typer.Exit(1)

    market = base.market.model_copy(update={"pool_id": pool}) if pool else base.market
    config = base.model_copy(update={"rebalancing": rebalancing, "market": market})
    pool = market.pool_id

    async def run_simulation():
        custody = InMemoryCustody()
        custody.mint(market.collateral_asset, config.account, funding)
        custody.mint(market.fee_asset, config.account, fee_funding)
        venue = SimulatedVenue(custody=custody, fee_asset=market.fee_asset)
        feed = StaticPriceFeed({market.base_asset: px})

        hedger = build_hedger(venue, custody, price_feed=feed, config=config)
        failures = []
        hedger.event_bus.subscribe(EventType.REBALANCE_FAILED, failures.append)

        outcomes: List[RebalanceOutcome] = []
        for step in deltas:
            try:
                outcomes.append(await hedger.on_exposure_change(pool, step))
            except HedgerError as e:
                console.print(f"[red]Delta {step} rolled back: {e}[/red]")
        return outcomes, hedger, failures

    outcomes, hedger, failures = asyncio.run(run_simulation())

    table = Table(title=f"Simulation: {pool} on {market.market}")
    table.add_column("#", justify="right")
    table.add_column("Exposure", justify="right")
    table.add_column("Action", style="cyan")
    table.add_column("Desired", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Size delta", justify="right")
    table.add_column("Collateral", justify="right")

    for i, outcome in enumerate(outcomes, 1):
        decision = outcome.decision
        order = outcome.order
        table.add_row(
            str(i),
            str(outcome.exposure),
            outcome.action.value,
            _usd(decision.desired_usd) if decision else "-",
            _usd(decision.current_usd) if decision else "-",
            _usd(order.size_delta_usd) if order else "-",
            str(order.collateral_delta) if order and order.collateral_delta else "-",
        )

    console.print(table)
    console.print(
        f"\n[dim]Committed: {len(outcomes)}  Rolled back: {len(failures)}  "
        f"Final exposure: {hedger.current_exposure(pool)}[/dim]"
    )


@app.command()
def version():
    """Show version information."""
    from src import __version__

    console.print(f"Delta Hedger v{__version__}")
