"""
Command-line interface for Convergence Lab.

Usage:
    convergence-lab methods        List registered solver methods
    convergence-lab converge       Error per iteration for each solver
    convergence-lab iterations     Iterations to convergence over a size sweep
"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from convergence_lab import __version__
from convergence_lab.algorithms.solvers import DIRECT_METHODS, METHODS
from convergence_lab.data.settings import DEFAULT_EPSILON, HARNESS_ITERATION_CEILING
from convergence_lab.data.systems import (
    DEFAULT_SEED,
    SYSTEM_KINDS,
    create_system,
    profile_system,
    system_factory,
)
from convergence_lab.errors import SolverError
from convergence_lab.harness import (
    convergence_table,
    format_cell,
    iteration_counts,
    safe_log10,
)

app = typer.Typer(
    name="convergence-lab",
    help="Compare iterative linear solvers under one execution protocol",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"convergence-lab version {__version__}")
        raise typer.Exit()


def _check_kind(kind: str) -> str:
    if kind not in SYSTEM_KINDS:
        raise typer.BadParameter(f"expected one of {', '.join(SYSTEM_KINDS)}")
    return kind


@app.callback()  # type: ignore[misc]
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log solver progress and failures."),
    ] = False,
) -> None:
    """Convergence Lab - Iterative solver comparisons."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()  # type: ignore[misc]
def methods() -> None:
    """Display the registered solver methods."""
    table = Table(title="Solver Methods")

    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Rule", style="dim")

    for name, rule in METHODS.items():
        kind = "direct" if name in DIRECT_METHODS else "iterative"
        table.add_row(name, kind, rule.__name__)

    console.print(table)


@app.command()  # type: ignore[misc]
def converge(
    size: Annotated[int, typer.Option("--size", "-n", help="System dimension")] = 10,
    kind: Annotated[
        str,
        typer.Option("--kind", "-k", help="System family", callback=_check_kind),
    ] = "dominant",
    epsilon: Annotated[
        float, typer.Option("--epsilon", "-e", help="Convergence threshold")
    ] = DEFAULT_EPSILON,
    component: Annotated[
        int,
        typer.Option("--component", "-c", help="Tracked component (-1: norm)"),
    ] = -1,
    rows: Annotated[int, typer.Option("--rows", "-r", help="Iterations shown")] = 20,
    seed: Annotated[int, typer.Option("--seed", "-s", help="Random seed")] = DEFAULT_SEED,
) -> None:
    """Show log10 error against the exact solution per iteration."""
    try:
        system = create_system(size, kind, seed=seed)
        profile = profile_system(system)
        result = convergence_table(
            system, epsilon, component=component, max_rows=rows
        )
    except SolverError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(
        f"[bold]{kind}[/] system n={profile.size}  "
        f"κ={profile.condition_number:.2e}  "
        f"symmetric={profile.symmetric}  "
        f"dominant={profile.diagonally_dominant}"
    )

    table = Table(title=f"log10 error (floor log10 ε = {format_cell(safe_log10(epsilon))})")
    table.add_column("k", justify="right", style="bold")
    for name in result.columns:
        table.add_column(name, justify="right")

    for k, row in enumerate(result.rows, start=1):
        table.add_row(str(k), *[format_cell(v) for v in row])

    console.print(table)

    for name in result.failed:
        console.print(f"[yellow]{name} failed[/]")


@app.command()  # type: ignore[misc]
def iterations(
    max_size: Annotated[
        int, typer.Option("--max-size", "-n", help="Largest system dimension")
    ] = 50,
    points: Annotated[int, typer.Option("--points", "-p", help="Sizes in sweep")] = 5,
    kind: Annotated[
        str,
        typer.Option("--kind", "-k", help="System family", callback=_check_kind),
    ] = "dominant",
    epsilon: Annotated[
        float, typer.Option("--epsilon", "-e", help="Convergence threshold")
    ] = DEFAULT_EPSILON,
    exponential: Annotated[
        bool, typer.Option("--exponential", help="Space sizes exponentially")
    ] = False,
    launches: Annotated[
        int, typer.Option("--launches", "-l", help="Runs averaged per size")
    ] = 1,
    ceiling: Annotated[
        int, typer.Option("--ceiling", help="Iterations counted as hung")
    ] = HARNESS_ITERATION_CEILING,
    seed: Annotated[int, typer.Option("--seed", "-s", help="Random seed")] = DEFAULT_SEED,
) -> None:
    """Show mean iterations to convergence over a sweep of system sizes."""
    try:
        result = iteration_counts(
            system_factory(kind, seed=seed),
            max_size,
            epsilon,
            points=points,
            exponential=exponential,
            launches=launches,
            ceiling=ceiling,
        )
    except SolverError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    table = Table(title=f"Iterations to convergence ({kind} systems)")
    table.add_column("n \\ solver", justify="right", style="bold")
    for name in result.columns:
        table.add_column(name, justify="right")

    for n, row in zip(result.sizes, result.rows, strict=True):
        table.add_row(str(n), *[format_cell(v, precision=1) for v in row])

    console.print(table)


if __name__ == "__main__":
    app()
