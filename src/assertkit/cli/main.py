"""assertkit CLI entry point."""

import importlib
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from assertkit import __version__

console = Console()


def configure_logging(debug: bool) -> None:
    """Route assertkit's log records to a rich handler."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_suite(target: str, project_root: Path) -> object:
    """Import ``package.module:SuiteClass`` and instantiate the suite."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"expected MODULE:SUITE, got {target!r}", param_hint="TARGET")
    root = str(project_root)
    if root not in sys.path:
        sys.path.insert(0, root)
    module = importlib.import_module(module_name)
    suite = module
    for part in attr.split("."):
        suite = getattr(suite, part)
    return suite() if isinstance(suite, type) else suite


@click.group()
@click.version_option(__version__, prog_name="assertkit")
def cli() -> None:
    """assertkit - assertions, mocks and suites for Python tests."""
    pass


@cli.command()
@click.argument("target")
@click.option(
    "--project",
    "-p",
    type=click.Path(exists=True, path_type=Path),
    help="Project root directory. Defaults to current directory.",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to assertkit.yaml config file.",
)
@click.option(
    "--match",
    "-m",
    help="Regular expression selecting which test methods run.",
)
@click.option(
    "--parallel",
    is_flag=True,
    help="Run test methods concurrently, each on its own copy of the suite.",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug output.",
)
def run(
    target: str,
    project: Path | None,
    config: Path | None,
    match: str | None,
    parallel: bool,
    debug: bool,
) -> None:
    """Run a test suite.

    TARGET is the suite to run, as package.module:SuiteClass.
    """
    from assertkit.assertions import T
    from assertkit.config import SuiteConfig, load_config, set_config
    from assertkit.diagnostics import ConfigError
    from assertkit.report import format_results
    from assertkit.suite import run as run_suite
    from assertkit.suite import run_parallel

    project_root = project or Path.cwd()

    # Load config
    try:
        cfg = load_config(config_path=config, project_root=project_root)
        if match is not None:
            cfg.suite = SuiteConfig.model_validate({**cfg.suite.model_dump(), "match": match})
    except (ConfigError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise SystemExit(1)

    # Override debug mode if flag is set
    if debug:
        cfg.debug_mode = True
    set_config(cfg)
    configure_logging(cfg.debug_mode)

    if cfg.debug_mode:
        console.print(f"[dim]Config: {cfg.model_dump_json(indent=2)}[/dim]\n")

    try:
        suite = load_suite(target, project_root)
    except click.BadParameter:
        raise
    except Exception as e:
        console.print(f"[red]Error loading suite:[/red] {e}")
        raise SystemExit(1)

    mode = "parallel" if parallel else "sequential"
    console.print(f"[dim]Running {target} ({mode})[/dim]\n")

    t = T(type(suite).__name__)
    runner = run_parallel if parallel else run_suite
    try:
        info = runner(t, suite)
    except Exception as e:
        t.error(f"suite run failed: {e!r}")
        info = None
    t.run_cleanups()

    output = format_results(t.result(), info, show_all_logs=cfg.debug_mode)

    if t.failed():
        console.print(Panel(output, title="[red]Tests Failed[/red]", border_style="red"))
        raise SystemExit(1)
    console.print(Panel(output, title="[green]Tests Passed[/green]", border_style="green"))


@cli.command()
def init() -> None:
    """Initialize assertkit in the current directory.

    Creates assertkit.yaml.
    """
    project_root = Path.cwd()

    config_file = project_root / "assertkit.yaml"
    if not config_file.exists():
        config_file.write_text(
            """\
# assertkit configuration
version: "0.1"

assertions:
  # Rendered values longer than this are truncated in failure messages (0 disables)
  # max_value_length: 1000

  # Default tick interval for eventually/never, in milliseconds
  eventually_tick_ms: 10

suite:
  # Regular expression selecting which test methods run
  # (ASSERTKIT_MATCH overrides it)
  # match: "^test_login"

  # Method-name prefix that marks a test method
  test_prefix: test

  # Worker threads used by run_parallel (default: one per test)
  # max_workers: 4

  # Timeout applied to every test method, in milliseconds
  # timeout_ms: 5000

# Enable verbose debug output
# debug_mode: false
"""
        )
        console.print(f"[green]✓[/green] Created {config_file.name}")
    else:
        console.print(f"[yellow]-[/yellow] {config_file.name} already exists")

    console.print("\n[dim]assertkit initialized.[/dim]")


@cli.command()
@click.option(
    "--project",
    "-p",
    type=click.Path(exists=True, path_type=Path),
    help="Project root directory. Defaults to current directory.",
)
def config(project: Path | None) -> None:
    """Show the current configuration."""
    from assertkit.config import load_config
    from assertkit.diagnostics import ConfigError

    project_root = project or Path.cwd()
    try:
        cfg = load_config(project_root=project_root)
    except ConfigError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise SystemExit(1)

    console.print(Panel(cfg.model_dump_json(indent=2), title="assertkit Config"))


if __name__ == "__main__":
    cli()
