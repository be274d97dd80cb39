"""Command-line interface for :mod:`jsexports`.

This module exposes the Typer application behind the ``jsexports`` console
script. A callback loads the layered configuration and logging once; the
subcommands share it through ``ctx.obj``.

Example:
    >>> import typer
    >>> from jsexports.cli import create_app
    >>> isinstance(create_app(), typer.Typer)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import tomllib

from pydantic import ValidationError
import typer

from jsexports.analysis import ExportAnalyzer, NodeModuleResolver
from jsexports.cli.scan import (
    iter_node_module_entries,
    render_json,
    render_outcome,
    resolve_target,
    scan_targets,
)
from jsexports.core.config import (
    ENV_CONFIG,
    AppConfig,
    ReexportPolicy,
    env_overrides,
    load_config,
    load_packaged_defaults,
    load_user_config,
    render_config,
)
from jsexports.core.logging import Logger, configure_logging, get_logger

_app_help = (
    "Statically determine the exports of JavaScript modules."
    "\n\n"
    "Use `jsexports scan FILE` to list a module's named and default exports."
)


@dataclass(slots=True)
class CLIContext:
    """Shared state created by the top-level callback."""

    config: AppConfig
    logger: Logger


def _require_context(ctx: typer.Context) -> CLIContext:
    context = getattr(ctx, "obj", None)
    if not isinstance(context, CLIContext):
        typer.secho(
            "Internal error: CLI context not initialized.",
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=1)
    return context


def _load_app_config(
    config_file: Path | None,
    log_level: str | None,
) -> AppConfig:
    """Assemble the configuration stack for this invocation.

    Raises:
        typer.Exit: If the user config cannot be read or validated.
    """

    if config_file is None and os.environ.get(ENV_CONFIG):
        config_file = Path(os.environ[ENV_CONFIG])

    try:
        user_config = load_user_config(config_file) if config_file else None
        cli_overrides = {"log_level": log_level} if log_level else None
        return load_config(
            defaults=load_packaged_defaults(),
            user_config=user_config,
            env_config=env_overrides(),
            cli_overrides=cli_overrides,
        )
    except (OSError, tomllib.TOMLDecodeError) as exc:
        typer.secho(f"Failed to read config {config_file}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    except (ValidationError, TypeError) as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``jsexports`` CLI."""

    app = typer.Typer(
        help=_app_help,
        no_args_is_help=True,
        rich_markup_mode="rich",
    )

    @app.callback()
    def main_callback(
        ctx: typer.Context,
        config_file: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help=f"TOML file overriding packaged defaults (or ${ENV_CONFIG}).",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
        log_file: Path | None = typer.Option(
            None,
            "--log-file",
            help="Also write JSON log events to this file.",
        ),
    ) -> None:
        config = _load_app_config(config_file, log_level)
        try:
            configure_logging(level=config.log_level, log_file=log_file)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--log-level") from exc

        ctx.obj = CLIContext(
            config=config,
            logger=get_logger(__name__, command=ctx.invoked_subcommand),
        )

    @app.command("scan", help="Report the exports of modules or packages.")
    def scan_command(
        ctx: typer.Context,
        targets: list[str] | None = typer.Argument(
            None,
            metavar="[FILE|PACKAGE]...",
            help="Files to analyze, or package names resolved from the cwd.",
        ),
        node_modules: bool = typer.Option(
            False,
            "--node-modules",
            help="Analyze the entry point of every package in ./node_modules.",
        ),
        as_json: bool = typer.Option(
            False,
            "--json",
            help="Emit results as a JSON document keyed by path.",
        ),
        strict: bool | None = typer.Option(
            None,
            "--strict/--lenient",
            help="Override whether re-export failures abort a module's analysis.",
        ),
    ) -> None:
        context = _require_context(ctx)
        settings = context.config.analyzer
        if strict is not None:
            policy = ReexportPolicy.STRICT if strict else ReexportPolicy.LENIENT
            settings = settings.model_copy(update={"reexport_policy": policy})

        resolver = NodeModuleResolver(extensions=settings.resolve_extensions)
        analyzer = ExportAnalyzer(
            settings=settings,
            resolver=resolver,
            logger=context.logger.bind(component="analyzer"),
        )

        cwd = Path.cwd()
        paths = [
            resolve_target(target, resolver=resolver, cwd=cwd)
            for target in targets or ()
        ]
        if node_modules:
            paths.extend(
                iter_node_module_entries(
                    cwd, resolver=resolver, logger=context.logger
                )
            )
        if not paths:
            raise typer.BadParameter(
                "Provide at least one target or --node-modules.",
                param_hint="[FILE|PACKAGE]...",
            )

        outcomes = scan_targets(paths, analyzer=analyzer, logger=context.logger)
        if as_json:
            typer.echo(render_json(outcomes))
        else:
            for outcome in outcomes:
                color = typer.colors.RED if outcome.failed else None
                for line in render_outcome(outcome):
                    typer.secho(line, fg=color)

        context.logger.info(
            "scan-complete",
            modules=len(outcomes),
            failures=sum(outcome.failed for outcome in outcomes),
        )
        if any(outcome.failed for outcome in outcomes):
            raise typer.Exit(code=1)

    @app.command(
        "default-name",
        help="Print the default export name guessed from a module's path.",
    )
    def default_name_command(
        ctx: typer.Context,
        path: Path = typer.Argument(..., help="Module file path."),
    ) -> None:
        context = _require_context(ctx)
        analyzer = ExportAnalyzer(settings=context.config.analyzer)
        typer.echo(analyzer.guess_default_export_name(path.resolve(strict=False)))

    @app.command("config", help="Print the effective configuration as TOML.")
    def config_command(ctx: typer.Context) -> None:
        context = _require_context(ctx)
        typer.echo(render_config(context.config), nl=False)

    return app


__all__ = ["CLIContext", "create_app"]
