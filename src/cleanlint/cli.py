from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import click
import typer
from rich.console import Console

from cleanlint import __version__
from cleanlint.config import CleanlintConfig, InvalidConfigError, load_config, load_config_file, validate_format
from cleanlint.engine.batch import SourceInput, run_batch
from cleanlint.engine.types import Report
from cleanlint.logging_utils import configure_logging
from cleanlint.reporters import EXIT_INTERNAL_ERROR, exit_status
from cleanlint.reporters.json_reporter import render_json
from cleanlint.reporters.text import print_text, render_summary
from cleanlint.rules.plugins import PluginLoadError, load_plugin_rules
from cleanlint.rules.registry import DuplicateRuleError, RuleRegistry, configure_registry, default_registry
from cleanlint.scanner import detect_project_root, discover_files, read_sources, resolve_worker_count, worker_count_from_env

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="cleanlint — clean-code checks for JavaScript.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Reduce non-essential output."),
    ] = False,
) -> None:
    """cleanlint CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet}


def _cli_settings() -> dict[str, bool]:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.obj, dict):
        return {"verbose": False, "quiet": False}
    return {"verbose": bool(ctx.obj.get("verbose", False)), "quiet": bool(ctx.obj.get("quiet", False))}


@dataclass(frozen=True, slots=True)
class _Project:
    root: Path
    config: CleanlintConfig
    registry: RuleRegistry


def _fail(message: str) -> typer.Exit:
    err_console.print(message, markup=False, highlight=False)
    return typer.Exit(code=EXIT_INTERNAL_ERROR)


def _load_project(
    config_path: Path | None,
    *,
    enable: list[str] | None = None,
    disable: list[str] | None = None,
) -> _Project:
    """
    Resolve the project root, load config and plugins, and configure the registry.

    Every failure here exits with status 2 before any file is read.
    """

    if config_path is not None:
        root = config_path.parent
    else:
        root = detect_project_root(Path.cwd())
    try:
        config = load_config_file(config_path) if config_path is not None else load_config(root)
    except InvalidConfigError as exc:
        raise _fail(f"Invalid configuration: {exc}") from exc

    registry = default_registry()
    try:
        for rule in load_plugin_rules(config.plugins):
            registry.register(rule)
    except PluginLoadError as exc:
        raise _fail(f"Failed to load plugins: {exc}") from exc
    except DuplicateRuleError as exc:
        raise _fail(f"Plugin rule conflict: {exc}") from exc
    except InvalidConfigError as exc:
        raise _fail(f"Invalid plugin rule: {exc}") from exc

    try:
        configure_registry(registry, config, enable=enable or (), disable=disable or ())
    except InvalidConfigError as exc:
        raise _fail(f"Invalid configuration: {exc}") from exc
    return _Project(root=root, config=config, registry=registry)


def _resolve_format(raw: str | None, config: CleanlintConfig) -> str:
    try:
        return validate_format(raw if raw is not None else config.format, field_name="--format")
    except InvalidConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Config file (.cleanlint.toml or pyproject.toml). Default: discovered from the current directory.",
    ),
]


@app.command()
def check(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(help="Files or directories to check (default: current directory)."),
    ] = None,
    output_format: Annotated[
        str | None,
        typer.Option("--format", help="Output format: text, json (default: use config)."),
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", help="Fail on warnings too (default: use config).", show_default=False),
    ] = None,
    config_path: ConfigOption = None,
    enable: Annotated[
        list[str] | None,
        typer.Option("--enable", help="Enable a rule by name (repeatable)."),
    ] = None,
    disable: Annotated[
        list[str] | None,
        typer.Option("--disable", help="Disable a rule by name (repeatable)."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", min=1, help="Files checked in parallel (default: config or CLEANLINT_WORKERS)."),
    ] = None,
    fail_fast: Annotated[
        bool,
        typer.Option("--fail-fast", help="Stop starting new files after the first failing report."),
    ] = False,
    stdin: Annotated[
        bool,
        typer.Option("--stdin", help="Read a single source file from stdin."),
    ] = False,
    stdin_filename: Annotated[
        str,
        typer.Option("--stdin-filename", help="Name reported for --stdin input."),
    ] = "<stdin>",
    show_fixes: Annotated[
        bool,
        typer.Option("--show-fixes", help="Print suggested fixes under each finding (text format)."),
    ] = False,
) -> None:
    """Check JavaScript files and report findings."""

    settings = _cli_settings()
    project = _load_project(config_path, enable=enable, disable=disable)
    config = project.config
    fmt = _resolve_format(output_format, config)
    effective_strict = strict if strict is not None else config.strict

    internal_error = False
    inputs: list[SourceInput] = []
    if stdin:
        inputs.append(SourceInput(path=stdin_filename, text=click.get_text_stream("stdin").read()))
    else:
        discovery = discover_files(
            paths or [Path(".")],
            project_root=project.root,
            ignore_patterns=config.ignore.paths,
        )
        for missing in discovery.missing:
            logger.error("No such file or directory: %s", missing)
            internal_error = True
        loaded = read_sources(discovery.files, project_root=project.root)
        if loaded.unreadable:
            internal_error = True
        inputs.extend(loaded.inputs)

    if workers is not None:
        worker_count = resolve_worker_count(str(workers))
    elif config.workers is not None:
        worker_count = resolve_worker_count(str(config.workers))
    else:
        worker_count = worker_count_from_env()

    cancel = threading.Event() if fail_fast else None

    def on_report(report: Report) -> None:
        if fmt == "text":
            print_text([report], console=console, show_fixes=show_fixes)
        if cancel is not None and exit_status([report], strict=effective_strict):
            cancel.set()

    snapshot = project.registry.snapshot()
    logger.debug("Active rules: %s", ", ".join(snapshot.names) or "(none)")
    result = run_batch(inputs, snapshot, workers=worker_count, cancel=cancel, on_report=on_report)

    if fmt == "json":
        typer.echo(render_json(result.reports))
    elif not settings["quiet"]:
        err_console.print(render_summary(result.reports, skipped=result.skipped), style="dim", highlight=False)

    if internal_error:
        raise typer.Exit(code=EXIT_INTERNAL_ERROR)
    code = exit_status(result.reports, strict=effective_strict)
    if code:
        raise typer.Exit(code=code)


@app.command()
def rules(
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: text, json.", show_default=True),
    ] = "text",
    enabled_only: Annotated[
        bool,
        typer.Option("--enabled-only", help="Only show rules enabled by the current config."),
    ] = False,
    config_path: ConfigOption = None,
) -> None:
    """
    List all available rules (built-in + plugin rules) and their configuration.
    """

    from rich.table import Table

    project = _load_project(config_path)
    registry = project.registry

    rows = []
    for rule in registry:
        enabled = registry.is_enabled(rule.name)
        if enabled_only and not enabled:
            continue
        rows.append(
            {
                "name": rule.name,
                "enabled": enabled,
                "severity": rule.severity,
                "default_severity": rule.meta.default_severity,
                "title": rule.meta.title,
                "description": rule.meta.description,
                "options": {key: list(v) if isinstance(v, tuple) else v for key, v in rule.options().items()},
            }
        )

    normalized = output_format.strip().lower()
    if normalized == "json":
        typer.echo(json.dumps(rows, indent=2))
        return
    if normalized != "text":
        raise typer.BadParameter("Unsupported format. Use: text, json.")

    table = Table(title="cleanlint rules")
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Enabled", justify="center")
    table.add_column("Severity")
    table.add_column("Title")
    for row in rows:
        table.add_row(
            str(row["name"]),
            "yes" if row["enabled"] else "no",
            str(row["severity"]),
            str(row["title"]),
        )
    console.print(table)


@app.command()
def explain(
    name: Annotated[
        str,
        typer.Argument(help="Rule name to explain (e.g. no-magic-number)."),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: text, json.", show_default=True),
    ] = "text",
    config_path: ConfigOption = None,
) -> None:
    """
    Explain a single rule (metadata, options, examples and suppression hints).
    """

    from rich.panel import Panel
    from rich.syntax import Syntax
    from rich.text import Text

    from cleanlint.rules.examples import example_for

    project = _load_project(config_path)
    try:
        rule = project.registry.get(name)
    except InvalidConfigError as exc:
        raise typer.BadParameter(f"{exc}. Use `cleanlint rules` to list available rules.") from exc

    meta = rule.meta
    example = example_for(meta.name)
    options = {key: list(v) if isinstance(v, tuple) else v for key, v in rule.options().items()}

    normalized = output_format.strip().lower()
    if normalized == "json":
        payload = {
            "name": meta.name,
            "title": meta.title,
            "description": meta.description,
            "default_severity": meta.default_severity,
            "options": options,
            "example": (
                {"bad": example.bad, "good": example.good, "notes": example.notes} if example is not None else None
            ),
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return
    if normalized != "text":
        raise typer.BadParameter("Unsupported format. Use: text, json.")

    header = Text()
    header.append(meta.name, style="bold")
    header.append(" — ", style="dim")
    header.append(meta.title)

    details = [meta.description, "", f"Default severity: {meta.default_severity}"]
    if options:
        details.append("Options: " + ", ".join(f"{key}={value!r}" for key, value in options.items()))
    console.print(Panel("\n".join(details), title=header, border_style="cyan"))

    console.print(Text("Config override (.cleanlint.toml):", style="bold"))
    console.print(
        Syntax(
            f"[rules.{meta.name}]\nseverity = \"error\"  # or warning\nenabled = true\n",
            "toml",
            word_wrap=True,
        )
    )
    console.print(Text("Suppressions (in-file):", style="bold"))
    console.print(
        Syntax(
            "\n".join(
                [
                    f"// cleanlint: disable-file={meta.name}",
                    f"doStuff(); // cleanlint: disable={meta.name}",
                    f"// cleanlint: disable-next-line={meta.name}",
                    "doStuff();",
                    "",
                ]
            ),
            "javascript",
            word_wrap=True,
        )
    )

    if example is not None:
        console.print(Text("Example:", style="bold"))
        if example.notes:
            console.print(Text(example.notes, style="dim"))
        console.print(Text("Bad:", style="bold"))
        console.print(Syntax(example.bad, "javascript", word_wrap=True))
        if example.good is not None:
            console.print(Text("Good:", style="bold"))
            console.print(Syntax(example.good, "javascript", word_wrap=True))
