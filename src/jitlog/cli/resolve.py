"""jitlog resolve command - re-resolve a manifest by signature."""

import json
import sys
from pathlib import Path

import click

from jitlog.core.errors import MalformedDescriptorError
from jitlog.descriptors import read_manifest, resolve_manifest


@click.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--path",
    "search_paths",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory to put on the import path first (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def resolve_command(
    ctx: click.Context, manifest: Path, search_paths: tuple[Path, ...], as_json: bool
) -> None:
    """Resolve every descriptor in MANIFEST in this environment.

    Exits with status 1 if any entry fails to resolve.
    """
    try:
        nodes = read_manifest(manifest)
    except MalformedDescriptorError as e:
        raise click.ClickException(str(e)) from e

    for entry in reversed(search_paths):
        path = str(entry.resolve())
        if path not in sys.path:
            sys.path.insert(0, path)

    results = resolve_manifest(nodes)
    failed = [r for r in results if not r.ok]

    if as_json:
        click.echo(
            json.dumps(
                {
                    "resolved": len(results) - len(failed),
                    "failed": len(failed),
                    "entries": [
                        {
                            "index": r.index,
                            "method": str(r.method) if r.method is not None else None,
                            "error": r.error.to_dict() if r.error is not None else None,
                        }
                        for r in results
                    ],
                },
                indent=2,
            )
        )
    else:
        for r in results:
            if r.ok:
                click.echo(f"  ok    [{r.index}] {r.method}")
            else:
                click.echo(f"  FAIL  [{r.index}] {r.node.name}: {r.error}")
        click.echo(f"Resolved {len(results) - len(failed)}/{len(results)}")

    if failed:
        ctx.exit(1)
