"""jitlog parse command - reconstruct compiled methods and write a manifest."""

import json
from pathlib import Path

import click

from jitlog.config import load_config
from jitlog.core.errors import ConfigError, DescriptorError, JitLogError
from jitlog.core.logging import configure_logging
from jitlog.descriptors import MethodNode, method_to_node, write_manifest
from jitlog.resolution import log_paths, parse_profiler_logs

_FilePath = click.Path(dir_okay=False, path_type=Path)


@click.command()
@click.argument("log_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--app-dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory of the profiled application",
)
@click.option("--jit", "jit_log", type=_FilePath, default=None, help="Compiled-method log")
@click.option("--modules", "modules_log", type=_FilePath, default=None, help="Module log")
@click.option("--metadata", "metadata_log", type=_FilePath, default=None, help="Metadata log")
@click.option("--out", "out", type=_FilePath, default=None, help="Write a descriptor manifest")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def parse_command(
    ctx: click.Context,
    log_dir: Path,
    app_dir: Path,
    jit_log: Path | None,
    modules_log: Path | None,
    metadata_log: Path | None,
    out: Path | None,
    as_json: bool,
) -> None:
    """Reconstruct the methods recorded in a profiler log directory.

    LOG_DIR holds the three logs under their configured names; --jit,
    --modules and --metadata override individual paths. Problems are
    reported as diagnostics and never change the exit code.
    """
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if not (ctx.obj or {}).get("verbose"):
        configure_logging(config=config.logging)

    default_jit, default_modules, default_metadata = log_paths(log_dir, config.logs)
    result = parse_profiler_logs(
        jit_log or default_jit,
        modules_log or default_modules,
        metadata_log or default_metadata,
        app_dir,
        config=config,
    )

    nodes: list[MethodNode] = []
    diagnostics: list[JitLogError] = list(result.diagnostics)
    for method in result.methods:
        try:
            nodes.append(method_to_node(method))
        except DescriptorError as e:
            diagnostics.append(e)

    if out is not None:
        write_manifest(out, nodes, indent=config.manifest.indent)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "methods": [node.to_json_dict() for node in nodes],
                    "diagnostics": [d.to_dict() for d in diagnostics],
                    "manifest": str(out) if out is not None else None,
                },
                indent=2,
            )
        )
        return

    click.echo(f"Resolved {len(result.methods)} method(s)")
    for method in result.methods:
        click.echo(f"  {method}")
    if out is not None:
        click.echo(f"Manifest: {out} ({len(nodes)} entries)")
    if diagnostics:
        click.echo(f"Diagnostics ({len(diagnostics)}):")
        for diagnostic in diagnostics:
            click.echo(f"  {diagnostic}")
