from pathlib import Path
from typing import List, Optional
import logging

import typer

from .cases import CASES, run_case
from .config import WalkthroughConfig
from .data import generate
from .logger import get_logger

app = typer.Typer(help="Linear Discriminant Analysis, step by step on synthetic data.")
app.command("generate")(generate)


@app.command("list")
def list_cases() -> None:
    """Show the available cases."""
    for name, case in CASES.items():
        print(f"{name:<16} {case['desc']}")


@app.command("run")
def run(
    cases: Optional[List[str]] = typer.Argument(None, help="Cases to run (default: all)"),
    seed: int = 42,
    n_per_group: int = 50,
    shift: float = 2.0,
    reports_dir: Path = Path("reports"),
    plots: bool = typer.Option(True, "--plots/--no-plots", help="Save figures"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Run the walkthrough cases and write reports."""
    get_logger(level=logging.DEBUG if verbose else logging.INFO)

    names = cases or list(CASES)
    unknown = [n for n in names if n not in CASES]
    if unknown:
        print(f"Unknown case(s): {', '.join(unknown)}. Choose from: {', '.join(CASES)}")
        raise typer.Exit(code=1)

    config = WalkthroughConfig(
        seed=seed,
        n_per_group=n_per_group,
        shift=shift,
        reports_dir=reports_dir,
        save_plots=plots,
    )

    for name in names:
        result = run_case(name, config)
        if result.failed:
            print(f"[{name}] LDA fit failed: {result.error}")
        else:
            print(f"[{name}] accuracy = {result.accuracy:.3f}")
            print(result.confusion.to_string())
        print(f"[{name}] report: {result.report}\n")


if __name__ == "__main__":
    app()
