"""
Command-Line Interface for FinRisk.

Purpose
-------
Runs household Monte Carlo simulations and manages parameter files
without writing Python code.

Commands
--------
- simulate: Run the Monte Carlo for one household and print a risk table
- params: Create, validate and display parameter files
- info: Show version and dependency information

Example Usage
-------------
    # Simulate the built-in sample household
    $ finrisk simulate --sample -n 5000 --seed 42

    # Create, edit and run a parameter file
    $ finrisk params create household.json
    $ finrisk simulate -c household.json --strategy aggressive --plot charts/

    # Show version
    $ finrisk --version
"""

from __future__ import annotations

import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import SAMPLE_PARAMETERS, AppSettings
from .exceptions import FinRiskError

logger = logging.getLogger(__name__)

# Version
__version__ = "0.1.0"


@click.group()
@click.version_option(version=__version__, prog_name="finrisk")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--verbose", "-v", is_flag=True, help="Enable INFO logging")
@click.pass_context
def main(ctx: click.Context, quiet: bool, verbose: bool) -> None:
    """
    FinRisk - Household Financial Risk Simulator.

    Monte Carlo projection of a household's cash, savings and debt under
    three debt/investment strategies, with ruin and goal probabilities.

    Use 'finrisk COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    level = settings.effective_log_level
    if verbose and level != "DEBUG":
        level = "INFO"
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = Console()


# ---------------------------------------------------------------------------
# simulate
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to household parameter file (JSON)"
)
@click.option(
    "--sample",
    is_flag=True,
    help="Use the built-in sample household instead of a file"
)
@click.option(
    "--runs", "-n",
    type=int,
    default=None,
    help="Monte Carlo runs per strategy (default: 5000 or FINRISK_DEFAULT_RUNS)"
)
@click.option(
    "--seed", "-s",
    type=int,
    default=None,
    help="Random seed for reproducibility"
)
@click.option(
    "--strategy",
    "strategies",
    type=click.Choice(["minimum", "aggressive", "investing"], case_sensitive=False),
    multiple=True,
    help="Strategy to simulate (repeatable; default: all)"
)
@click.option(
    "--plot",
    "plot_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to write PNG charts into"
)
@click.pass_context
def simulate(
    ctx: click.Context,
    config: Optional[Path],
    sample: bool,
    runs: Optional[int],
    seed: Optional[int],
    strategies: Tuple[str, ...],
    plot_dir: Optional[Path],
) -> None:
    """
    Run the Monte Carlo simulation.

    Simulates every requested strategy and prints median, 5th and 95th
    percentile ending net worth, ruin / goal / debt-free probabilities
    and tail risk.

    Example:
        finrisk simulate -c household.json -n 10000 --seed 42
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    settings: AppSettings = ctx.obj["settings"]

    from .analytics import monthly_surplus, strategy_comparison
    from .montecarlo import run_monte_carlo
    from .serialization import load_parameters

    if config is None and not sample:
        click.echo("Error: provide --config FILE or --sample", err=True)
        sys.exit(1)
    if config is not None and sample:
        click.echo("Error: --config and --sample are mutually exclusive", err=True)
        sys.exit(1)

    if sample:
        params = SAMPLE_PARAMETERS
    else:
        try:
            params = load_parameters(config)
        except FinRiskError as e:
            click.echo(f"Error loading parameters: {e}", err=True)
            sys.exit(1)

    runs = settings.default_runs if runs is None else runs
    seed = settings.default_seed if seed is None else seed
    selected = list(strategies) or None

    if not quiet:
        console.print(
            f"[bold]Running {runs:,} simulations per strategy over "
            f"{params.horizon_years} years...[/bold]"
        )

    try:
        if quiet:
            results = run_monte_carlo(params, runs, seed=seed, strategies=selected)
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(),
                TextColumn("{task.completed:,}/{task.total:,}"),
                console=console,
                transient=True,
            ) as progress:
                tasks = {}

                def on_progress(strategy, completed, total):
                    if strategy not in tasks:
                        tasks[strategy] = progress.add_task(strategy.label, total=total)
                    progress.update(tasks[strategy], completed=completed)

                results = run_monte_carlo(
                    params, runs, seed=seed, strategies=selected,
                    progress_callback=on_progress,
                )
    except FinRiskError as e:
        click.echo(f"Error during simulation: {e}", err=True)
        sys.exit(1)

    table_df = strategy_comparison(results)

    if quiet:
        for key, row in table_df.iterrows():
            click.echo(
                f"{key}: median={row['median_net_worth']:,.0f} "
                f"ruin={row['ruin_probability']:.4f} "
                f"goal={row['goal_probability']:.4f} "
                f"debt_free={row['debt_free_probability']:.4f}"
            )
    else:
        from .utils import format_money, format_months, format_pct

        table = Table(title="Simulation Results", show_header=True)
        table.add_column("Metric", style="cyan")
        for key in table_df.index:
            table.add_column(table_df.loc[key, "label"], style="green", justify="right")

        def row(name, column, fmt):
            table.add_row(name, *[fmt(table_df.loc[k, column]) for k in table_df.index])

        def as_month(v):
            return format_months(None if v is None or v != v else int(v))

        row("Median Net Worth", "median_net_worth", format_money)
        row("5th Percentile", "p5_net_worth", format_money)
        row("95th Percentile", "p95_net_worth", format_money)
        table.add_row("", *["" for _ in table_df.index])
        row("Ruin Probability", "ruin_probability", format_pct)
        table.add_row("Ruin 95% CI", *[
            f"{format_pct(table_df.loc[k, 'ruin_ci_low'])} to {format_pct(table_df.loc[k, 'ruin_ci_high'])}"
            for k in table_df.index
        ])
        row("Goal Probability", "goal_probability", format_pct)
        row("Debt-Free Probability", "debt_free_probability", format_pct)
        row("Median Debt-Free", "median_debt_free_month", as_month)
        table.add_row("", *["" for _ in table_df.index])
        row("VaR 95%", "var95", format_money)
        row("CVaR 95%", "cvar95", format_money)
        row("Gaussian VaR 95%", "parametric_var95", format_money)

        console.print(table)
        console.print(
            f"Expected monthly surplus: {format_money(monthly_surplus(params))} | "
            f"Goal: {format_money(params.savings_goal)}"
        )

    if plot_dir is not None:
        written = _write_charts(results, params.savings_goal, plot_dir)
        if not quiet:
            for path in written:
                console.print(f"[green]Saved {path}[/green]")


def _write_charts(results, goal: float, plot_dir: Path):
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from .analytics import terminal_correlation
    from .plotting import (
        plot_correlation_heatmap,
        plot_histogram,
        plot_scenario_bar,
        plot_strategy_comparison,
        plot_var,
    )

    plot_dir.mkdir(parents=True, exist_ok=True)
    written = []

    path = plot_dir / "net_worth_bands.png"
    fig, _ = plot_strategy_comparison(results, goal=goal, save_path=str(path))
    plt.close(fig)
    written.append(path)

    path = plot_dir / "ending_net_worth.png"
    fig, _ = plot_histogram(results, save_path=str(path))
    plt.close(fig)
    written.append(path)

    path = plot_dir / "scenario_comparison.png"
    fig, _ = plot_scenario_bar(results, save_path=str(path))
    plt.close(fig)
    written.append(path)

    for strategy, res in results.items():
        path = plot_dir / f"var_{strategy.value}.png"
        fig, _ = plot_var(res, save_path=str(path))
        plt.close(fig)
        written.append(path)

        corr = terminal_correlation(res.sampled_trajectories)
        if corr is None:
            logger.info("Skipping correlation chart for %s: too few trajectories", strategy.value)
            continue
        path = plot_dir / f"correlation_{strategy.value}.png"
        fig, _ = plot_correlation_heatmap(corr, save_path=str(path))
        plt.close(fig)
        written.append(path)

    logger.info("Wrote %d charts to %s", len(written), plot_dir)
    return written


# ---------------------------------------------------------------------------
# params
# ---------------------------------------------------------------------------

@main.group()
def params() -> None:
    """
    Parameter file commands.

    Create, validate and display household parameter files.
    """
    pass


@params.command("create")
@click.argument("output_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def params_create(ctx: click.Context, output_file: Path, force: bool) -> None:
    """
    Create a parameter file pre-filled with the sample household.

    Example:
        finrisk params create household.json
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .serialization import save_parameters

    if output_file.exists() and not force:
        click.echo(f"Error: {output_file} already exists (use --force)", err=True)
        sys.exit(1)

    save_parameters(SAMPLE_PARAMETERS, output_file)

    if not quiet:
        console.print(f"[green]Created parameter file: {output_file}[/green]")


@params.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def params_validate(ctx: click.Context, config_file: Path) -> None:
    """
    Validate a parameter file.

    Example:
        finrisk params validate household.json
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .analytics import debt_to_income, monthly_surplus
    from .serialization import load_parameters
    from .utils import format_money, format_pct

    try:
        p = load_parameters(config_file)
    except FinRiskError as e:
        click.echo(f"Parameter validation failed: {e}", err=True)
        sys.exit(1)

    if quiet:
        click.echo("Parameters are valid")
        return

    info = (
        "[bold]Household Parameters Valid[/bold]\n\n"
        f"[cyan]Horizon:[/cyan] {p.horizon_years} years ({p.months} months)\n"
        f"[cyan]Monthly surplus:[/cyan] {format_money(monthly_surplus(p))}\n"
        f"[cyan]Debt-to-income:[/cyan] {format_pct(debt_to_income(p))}\n"
        f"[cyan]Savings goal:[/cyan] {format_money(p.savings_goal)}"
    )
    console.print(Panel(info, title="Parameter Summary", border_style="green"))


@params.command("show")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "-f", type=click.Choice(["json", "table"]), default="table")
@click.pass_context
def params_show(ctx: click.Context, config_file: Path, format: str) -> None:
    """
    Display a parameter file.

    Example:
        finrisk params show household.json --format json
    """
    console: Console = ctx.obj["console"]

    from .serialization import load_parameters, parameters_to_dict

    try:
        p = load_parameters(config_file)
    except FinRiskError as e:
        click.echo(f"Error loading parameters: {e}", err=True)
        sys.exit(1)

    if format == "json":
        click.echo(json.dumps(parameters_to_dict(p), indent=2))
        return

    table = Table(title=f"Household Parameters ({config_file.name})")
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    for name, value in p.model_dump().items():
        table.add_row(name, f"{value:,}" if isinstance(value, (int, float)) else str(value))
    console.print(table)


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display system and package information.

    Shows version numbers and installed dependencies.
    """
    console: Console = ctx.obj["console"]

    info_lines = [
        f"FinRisk Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]

    for dist in ("numpy", "pandas", "scipy", "matplotlib", "pydantic",
                 "pydantic-settings", "click", "rich"):
        try:
            info_lines.append(f"{dist}: {dist_version(dist)}")
        except PackageNotFoundError:
            info_lines.append(f"{dist}: not installed")

    if ctx.obj.get("quiet", False):
        for line in info_lines:
            click.echo(line)
    else:
        console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
