"""
CLI module - Command line interface for fanout

Entry point for the `fanout` command using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import AppConfig, ConfigError, load_config, validate_config
from .constants import DEFAULT_JOBS, EXIT_USAGE
from .runners import (
    CommandResult,
    FailurePolicy,
    RunnerCallbacks,
    ShellCommandRunner,
    StageResult,
    WorkflowOrchestrator,
    WorkflowResult,
)
from .workflow import (
    Stage,
    StageKind,
    Workflow,
    WorkflowError,
    build_workflow,
    needs_stdin,
    parse_step_args,
    read_stdin_commands,
)

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="fanout",
    help="fanout - Run shell commands as sequential and concurrent stages.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Step flags (-s/-c/-i) are parsed by us, in order, from the extra arguments
STEP_CONTEXT = {"allow_extra_args": True, "ignore_unknown_options": True}


def version_callback(value: bool):
    if value:
        console.print(f"fanout version {__version__}")
        raise typer.Exit()


# Type aliases for common options
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config file", exists=True, dir_okay=False),
]
JobsOption = Annotated[
    int | None,
    typer.Option(
        "--jobs",
        "-j",
        min=1,
        help=f"Max concurrent commands per concurrent stage (config or FANOUT_JOBS, else {DEFAULT_JOBS})",
    ),
]


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version")
    ] = False,
):
    """fanout - Run shell commands as sequential and concurrent stages."""
    pass


def setup_logging(level: str, verbose: bool = False) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else str(level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_settings(config_path: Path | None) -> AppConfig:
    """Load and validate configuration, exiting on problems."""
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        err_console.print(f"[red]Config error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE) from None

    errors = validate_config(cfg)
    if errors:
        for error in errors:
            err_console.print(f"[red]Config error:[/red] {escape(error)}")
        raise typer.Exit(EXIT_USAGE)
    return cfg


def _build_from_args(tokens: list[str]) -> Workflow:
    """Build a workflow from step tokens, reading stdin if asked to."""
    try:
        declarations = parse_step_args(tokens)
        stdin_commands = None
        if needs_stdin(declarations):
            stdin_commands = read_stdin_commands(typer.get_text_stream("stdin"))
        return build_workflow(declarations, stdin_commands)
    except WorkflowError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE) from None


def describe_stage(stage: Stage) -> str:
    """One-line description of a stage."""
    if stage.kind == StageKind.SEQUENTIAL:
        return stage.command
    return f"{len(stage.commands)} commands"


@app.command(context_settings=STEP_CONTEXT)
def run(
    ctx: typer.Context,
    jobs: JobsOption = None,
    shell: Annotated[str | None, typer.Option("--shell", help="Shell executable used to run commands")] = None,
    policy: Annotated[
        FailurePolicy | None,
        typer.Option("--policy", help="Which outcomes count as failures", case_sensitive=False),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Show debug logging")] = False,
    config: ConfigOption = None,
):
    """
    Run a workflow.

    Steps are declared in order. Consecutive [cyan]-c[/cyan] commands form one
    concurrent stage; each [cyan]-s[/cyan] command is its own stage; [cyan]-i[/cyan]
    reads one command per line from stdin as a concurrent stage.

    [bold]Examples:[/bold]

        fanout run -s "make build" -c "make test-a" -c "make test-b" -s "make deploy"

        ls *.txt | sed 's/^/gzip /' | fanout run -i -j 8
    """
    cfg = _load_settings(config)
    setup_logging(cfg.logging.level, verbose)

    workflow = _build_from_args(ctx.args)
    limit = jobs or cfg.execution.jobs
    failure_policy = policy or cfg.failure_policy

    total_stages = len(workflow)

    def on_stage_start(index: int, stage: Stage):
        label = "concurrent" if stage.kind == StageKind.CONCURRENT else "sequential"
        err_console.print(f"[bold][{index + 1}/{total_stages}][/bold] {label}: {escape(describe_stage(stage))}")

    def on_command_failed(result: CommandResult, fatal: bool):
        marker = "[red]✗ fatal[/red]" if fatal else "[yellow]✗[/yellow]"
        err_console.print(f"  {marker} {escape(result.command)} {escape(result.outcome.describe())}")

    def on_stage_complete(index: int, stage_result: StageResult):
        if stage_result.should_abort:
            err_console.print(f"[red]Stopping:[/red] stage {index + 1} failed")

    def on_workflow_complete(result: WorkflowResult):
        status = "[green]Complete[/green]" if result.success else "[red]Failed[/red]"
        err_console.print(
            f"[bold]{status}:[/bold] {result.stages_completed}/{result.stages_total} stages, "
            f"{result.commands_run} commands, {result.commands_failed} failed"
        )

    callbacks = RunnerCallbacks(
        on_stage_start=on_stage_start,
        on_command_failed=on_command_failed,
        on_stage_complete=on_stage_complete,
        on_workflow_complete=on_workflow_complete,
    )

    orchestrator = WorkflowOrchestrator(ShellCommandRunner(shell or cfg.execution.shell), failure_policy)
    result = orchestrator.run(workflow, limit, callbacks)

    raise typer.Exit(result.exit_code)


@app.command(context_settings=STEP_CONTEXT)
def plan(
    ctx: typer.Context,
    jobs: JobsOption = None,
    config: ConfigOption = None,
):
    """Show the stages a workflow would run, without running anything."""
    cfg = _load_settings(config)
    workflow = _build_from_args(ctx.args)
    limit = jobs or cfg.execution.jobs

    count = len(workflow)
    console.print(f"[bold]Plan:[/bold] {count} stage{'' if count == 1 else 's'}, up to {limit} concurrent")

    table = Table()
    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind", style="cyan")
    table.add_column("Commands", style="green")

    for index, stage in enumerate(workflow, start=1):
        table.add_row(str(index), stage.kind.value, escape("\n".join(stage.commands)))

    console.print(table)
