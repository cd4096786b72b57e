"""CLI main entry point."""

import asyncio
import json
import sys
from pathlib import Path

import click

from .config import TryConfig, config_to_dict, load_config
from .errors import EmberTryError
from .models import RunOptions, Scenario
from .reporter import print_config_yaml
from .shared.logging import configure_logging, level_for_verbosity
from .tasks import ResetTask, TryEachTask

COMMAND_CONTEXT = {"ignore_unknown_options": True, "allow_interspersed_args": False}


def run_options_option(func):
    """Options shared by the commands that run scenarios."""
    func = click.option(
        "--timeout-is-success",
        is_flag=True,
        help="Treat a command that hits --timeout-ms as passing",
    )(func)
    func = click.option("--timeout-ms", type=int, help="Kill the command after N milliseconds")(func)
    func = click.option(
        "--skip-cleanup",
        is_flag=True,
        help="Leave the last scenario's dependencies installed",
    )(func)
    return func


@click.group()
@click.option("-c", "--config-path", type=click.Path(), help="Config file path")
@click.option(
    "--cwd",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Project root",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
@click.option("--log-file", type=click.Path(), help="Write JSON logs to this file")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    cwd: str,
    verbose: int,
    quiet: bool,
    log_file: str | None,
    json_output: bool,
) -> None:
    """Run your test command against each dependency scenario."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["project_root"] = Path(cwd).resolve()
    ctx.obj["json_output"] = json_output
    configure_logging(
        level_for_verbosity(verbose, quiet),
        log_file=log_file,
        json_output=bool(log_file),
    )


def _load(ctx: click.Context) -> TryConfig:
    try:
        return load_config(ctx.obj["project_root"], ctx.obj["config_path"])
    except EmberTryError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)


def _build_options(
    command: tuple[str, ...],
    skip_cleanup: bool,
    timeout_ms: int | None,
    timeout_is_success: bool,
) -> RunOptions:
    command_options = {}
    if timeout_ms is not None:
        command_options["timeout"] = {"length": timeout_ms, "isSuccess": timeout_is_success}
    return RunOptions(
        command_args=list(command),
        command_options=command_options,
        skip_cleanup=skip_cleanup,
    )


def _run_scenarios(
    ctx: click.Context,
    config: TryConfig,
    scenarios: list[Scenario],
    options: RunOptions,
) -> None:
    task = TryEachTask(
        ctx.obj["project_root"],
        config,
        options=options,
        exit=lambda code: None,
    )
    try:
        summary = asyncio.run(task.run(scenarios))
    except EmberTryError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    sys.exit(summary.exit_code)


@cli.command(context_settings=COMMAND_CONTEXT)
@run_options_option
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def each(
    ctx: click.Context,
    skip_cleanup: bool,
    timeout_ms: int | None,
    timeout_is_success: bool,
    command: tuple[str, ...],
) -> None:
    """Run COMMAND (default: the configured command) for every scenario.

    Examples:

        ember-try each

        ember-try each -- ember test --filter smoke

        ember-try each --timeout-ms 20000 --timeout-is-success ember serve
    """
    config = _load(ctx)
    options = _build_options(command, skip_cleanup, timeout_ms, timeout_is_success)
    _run_scenarios(ctx, config, config.scenarios, options)


@cli.command(context_settings=COMMAND_CONTEXT)
@click.argument("scenario")
@run_options_option
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def one(
    ctx: click.Context,
    scenario: str,
    skip_cleanup: bool,
    timeout_ms: int | None,
    timeout_is_success: bool,
    command: tuple[str, ...],
) -> None:
    """Run COMMAND for a single SCENARIO."""
    config = _load(ctx)
    try:
        selected = config.get_scenario(scenario)
    except EmberTryError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    options = _build_options(command, skip_cleanup, timeout_ms, timeout_is_success)
    _run_scenarios(ctx, config, [selected], options)


@cli.command()
@click.pass_context
def reset(ctx: click.Context) -> None:
    """Restore package.json / bower.json from an interrupted run."""
    config = _load(ctx)
    task = ResetTask(ctx.obj["project_root"], config)
    try:
        restored = asyncio.run(task.run())
    except EmberTryError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    if restored:
        click.echo(f"Restored: {', '.join(restored)}")
    else:
        click.echo("Nothing to reset")


@cli.command("config")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the normalized scenario configuration."""
    config = _load(ctx)
    data = config_to_dict(config)

    if ctx.obj["json_output"]:
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(f"Source: {config.path}\n")
        print_config_yaml(data)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
