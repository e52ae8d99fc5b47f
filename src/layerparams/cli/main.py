"""
Main CLI entry point for layerparams.

Provides the command-line interface using Click:

    layerparams merge base.yaml prod.yaml
    layerparams provenance -s Global:1:global.yaml -s Production:2:prod.yaml
    layerparams resolve --configuration web --node web01.example.com \\
        --scope Environment:Production:10
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import rich.console as _rich_console
import rich.logging as _rich_logging
import rich.table as _rich_table

import layerparams
import layerparams.config as config
import layerparams.errors as errors
import layerparams.merger as merger
import layerparams.store as store

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_FORMAT_CHOICES = [f.value for f in merger.OutputFormat]


def _configure_logging(level: str) -> None:
    """Send layerparams log records to stderr through rich."""
    package_logger = _logging.getLogger("layerparams")
    for handler in list(package_logger.handlers):
        if isinstance(handler, _rich_logging.RichHandler):
            package_logger.removeHandler(handler)

    handler = _rich_logging.RichHandler(
        console=_rich_console.Console(stderr=True),
        show_path=False,
    )
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def _build_options(
    settings: config.Settings,
    output_format: str | None,
    include_comments: bool | None,
    strict_root: bool | None,
) -> merger.MergeOptions:
    """Command-line flags win over settings."""
    base = merger.MergeOptions.from_settings(settings)
    return merger.MergeOptions(
        output_format=(
            merger.OutputFormat(output_format) if output_format else base.output_format
        ),
        include_comments=base.include_comments if include_comments is None else include_comments,
        strict_root=base.strict_root if strict_root is None else strict_root,
    )


def _parse_source_spec(spec: str) -> tuple[str, int, _pathlib.Path]:
    """Parse NAME:PRECEDENCE:PATH."""
    parts = spec.split(":", 2)
    if len(parts) != 3 or not parts[0] or not parts[2]:
        raise _click.BadParameter(f"expected NAME:PRECEDENCE:PATH, got {spec!r}")
    name, precedence, path = parts
    try:
        return name, int(precedence), _pathlib.Path(path)
    except ValueError:
        raise _click.BadParameter(f"precedence must be an integer in {spec!r}") from None


def _parse_scope_spec(spec: str) -> store.ScopeTag:
    """Parse TYPE:VALUE:PRECEDENCE."""
    parts = spec.rsplit(":", 2)
    if len(parts) != 3 or not parts[0] or not parts[1]:
        raise _click.BadParameter(f"expected TYPE:VALUE:PRECEDENCE, got {spec!r}")
    scope_type, value, precedence = parts
    try:
        return store.ScopeTag(scope_type=scope_type, value=value, precedence=int(precedence))
    except ValueError:
        raise _click.BadParameter(f"precedence must be an integer in {spec!r}") from None


def _read_file(path: _pathlib.Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise _click.FileError(str(path), hint=str(e)) from e


def _echo_document(content: str) -> None:
    _click.echo(content, nl=not content.endswith("\n"))


def _print_provenance(result: merger.MergeResult) -> None:
    """Render the provenance ledger as a table."""
    console = _rich_console.Console()
    if not result.provenance:
        console.print("No values overridden (single scope or baseline only).")
        return

    table = _rich_table.Table(title="Provenance")
    table.add_column("Path", style="cyan")
    table.add_column("Scope")
    table.add_column("Precedence", justify="right")
    table.add_column("Value")
    table.add_column("Overrode")

    for path, record in sorted(result.provenance.items()):
        overrode = ", ".join(
            f"{v.scope_name}={_json.dumps(v.value)}" for v in record.overridden_values or []
        )
        table.add_row(
            path,
            record.scope_name,
            str(record.precedence),
            _json.dumps(record.value),
            overrode,
        )
    console.print(table)


def _emit_result(result: merger.MergeResult, *, as_json: bool) -> None:
    if as_json:
        _click.echo(_json.dumps(result.to_api(), indent=2, ensure_ascii=False))
        return
    _echo_document(result.merged_content)
    _print_provenance(result)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(layerparams.__version__, "-v", "--version", prog_name="layerparams")
@_click.option("--verbose", is_flag=True, help="Enable debug logging")
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """layerparams - merge layered parameter documents.

    Later documents override earlier ones: mappings merge recursively,
    everything else is replaced.
    """
    settings = config.Settings()
    _configure_logging("DEBUG" if verbose else settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@_click.argument(
    "files",
    nargs=-1,
    required=True,
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
)
@_click.option("--format", "output_format", type=_click.Choice(_FORMAT_CHOICES), default=None)
@_click.option(
    "--include-comments/--no-include-comments",
    default=None,
    help="No-op, accepted for compatibility",
)
@_click.option("--strict-root/--no-strict-root", default=None, help="Fail on non-mapping documents")
@_click.pass_context
def merge(
    ctx: _click.Context,
    files: tuple[_pathlib.Path, ...],
    output_format: str | None,
    include_comments: bool | None,
    strict_root: bool | None,
) -> None:
    """Merge FILES in order (first = lowest precedence)."""
    options = _build_options(ctx.obj["settings"], output_format, include_comments, strict_root)
    documents = [_read_file(path) for path in files]

    try:
        merged = merger.merge(documents, options)
    except errors.ParameterMergeError as e:
        _click.echo(str(e), err=True)
        raise SystemExit(1) from None

    _echo_document(merged)


@cli.command()
@_click.option(
    "-s",
    "--source",
    "source_specs",
    multiple=True,
    required=True,
    help="Scoped source as NAME:PRECEDENCE:PATH (repeatable)",
)
@_click.option("--format", "output_format", type=_click.Choice(_FORMAT_CHOICES), default=None)
@_click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Output merged content and provenance as JSON",
)
@_click.option(
    "--include-comments/--no-include-comments",
    default=None,
    help="No-op, accepted for compatibility",
)
@_click.option("--strict-root/--no-strict-root", default=None, help="Fail on non-mapping documents")
@_click.pass_context
def provenance(
    ctx: _click.Context,
    source_specs: tuple[str, ...],
    output_format: str | None,
    as_json: bool,
    include_comments: bool | None,
    strict_root: bool | None,
) -> None:
    """Merge scoped sources and show which scope set each value."""
    options = _build_options(ctx.obj["settings"], output_format, include_comments, strict_root)

    sources = []
    for spec in source_specs:
        name, precedence, path = _parse_source_spec(spec)
        sources.append(
            merger.ParameterSource(scope_name=name, precedence=precedence, content=_read_file(path))
        )

    try:
        result = merger.merge_with_provenance(sources, options)
    except errors.ParameterMergeError as e:
        _click.echo(str(e), err=True)
        raise SystemExit(1) from None

    _emit_result(result, as_json=as_json)


@cli.command()
@_click.option(
    "--data-dir",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Store root (default: LAYERPARAMS_DATA_DIR or ./data)",
)
@_click.option("--configuration", required=True, help="Configuration name")
@_click.option("--node", "node_fqdn", required=True, help="Node FQDN")
@_click.option(
    "--scope",
    "scope_specs",
    multiple=True,
    help="Scope assignment as TYPE:VALUE:PRECEDENCE (repeatable)",
)
@_click.option(
    "--provenance",
    "show_provenance",
    is_flag=True,
    help="Show where each value came from",
)
@_click.option("--json", "as_json", is_flag=True, help="With --provenance, output JSON")
@_click.option("--format", "output_format", type=_click.Choice(_FORMAT_CHOICES), default=None)
@_click.option(
    "--include-comments/--no-include-comments",
    default=None,
    help="No-op, accepted for compatibility",
)
@_click.option("--strict-root/--no-strict-root", default=None, help="Fail on non-mapping documents")
@_click.pass_context
def resolve(
    ctx: _click.Context,
    data_dir: _pathlib.Path | None,
    configuration: str,
    node_fqdn: str,
    scope_specs: tuple[str, ...],
    show_provenance: bool,
    as_json: bool,
    output_format: str | None,
    include_comments: bool | None,
    strict_root: bool | None,
) -> None:
    """Resolve the merged parameters of a node from the scope store."""
    settings: config.Settings = ctx.obj["settings"]
    options = _build_options(settings, output_format, include_comments, strict_root)
    tags = [_parse_scope_spec(spec) for spec in scope_specs]
    parameter_store = store.ParameterStore(data_dir or settings.data_dir)

    try:
        sources = parameter_store.collect_sources(
            configuration,
            node_fqdn=node_fqdn,
            tags=tags,
            default_precedence=settings.default_precedence,
            node_precedence=settings.node_precedence,
        )
        if not sources:
            raise _click.ClickException(
                f"No parameter files for {configuration!r} apply to {node_fqdn}"
            )

        if show_provenance:
            _emit_result(merger.merge_with_provenance(sources, options), as_json=as_json)
        else:
            _echo_document(merger.merge([s.content for s in sources], options))
    except errors.ParameterMergeError as e:
        _click.echo(str(e), err=True)
        raise SystemExit(1) from None


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="layerparams")


if __name__ == "__main__":
    main()
