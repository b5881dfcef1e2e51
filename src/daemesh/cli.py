"""Click CLI entry point for daemesh."""

from __future__ import annotations

import json
from pathlib import Path

import click

from daemesh import __version__
from daemesh.errors import DaeMeshError
from daemesh.exporter import ExportOptions, export_dae
from daemesh.importer import ImportOptions, import_dae
from daemesh.mesh import Mesh
from daemesh.warning_policy import WarningPolicy, describe_codes, parse_code_list


def _build_warning_policy(
    warn_as_error: str | None, suppress_warning: str | None
) -> WarningPolicy | None:
    """Parse CLI warning options into a WarningPolicy, or None if unset."""
    if warn_as_error is None and suppress_warning is None:
        return None
    try:
        wae = parse_code_list(warn_as_error) if warn_as_error else frozenset()
        sup = parse_code_list(suppress_warning) if suppress_warning else frozenset()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    return WarningPolicy(warn_as_error=wae, suppress=sup)


def _default_output(input_file: Path) -> Path:
    return input_file.parent / f"{input_file.stem}.welded.dae"


def _summarize(mesh: Mesh) -> dict:
    return {
        "vertices": mesh.vertex_count,
        "triangles": mesh.triangle_count,
        "normals": mesh.has_normals,
        "texcoords": mesh.has_texcoords,
        "comment": mesh.comment,
    }


warn_as_error_option = click.option(
    "--warn-as-error",
    "warn_as_error",
    type=str,
    default=None,
    help="Comma-separated W-codes to treat as errors (see `daemesh warnings`).",
)
suppress_warning_option = click.option(
    "--suppress-warning",
    "suppress_warning",
    type=str,
    default=None,
    help="Comma-separated W-codes to suppress (see `daemesh warnings`).",
)
triangulate_option = click.option(
    "--triangulate-polylists",
    is_flag=True,
    default=False,
    help="Fan-triangulate <polylist> primitives instead of skipping them.",
)


@click.group()
@click.version_option(version=__version__, prog_name="daemesh")
def main() -> None:
    """daemesh: COLLADA (DAE) triangle mesh import/export."""


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Summary output format.",
)
@triangulate_option
@warn_as_error_option
@suppress_warning_option
def info(
    input_file: Path,
    output_format: str = "text",
    triangulate_polylists: bool = False,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Import a DAE file and print a summary of the welded mesh."""
    policy = _build_warning_policy(warn_as_error, suppress_warning)
    options = ImportOptions(triangulate_polylists=triangulate_polylists, warning_policy=policy)
    try:
        mesh = import_dae(input_file, options=options)
    except DaeMeshError as e:
        raise click.ClickException(str(e))

    summary = _summarize(mesh)
    if output_format == "json":
        click.echo(json.dumps(summary, indent=2))
        return
    for key, value in summary.items():
        if isinstance(value, bool):
            value = "yes" if value else "no"
        click.echo(f"{key}: {value}")


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output DAE file path. Defaults to <input stem>.welded.dae.",
)
@click.option("--comment", type=str, default=None, help="Replace the mesh comment.")
@click.option(
    "--authoring-tool",
    type=str,
    default=ExportOptions.authoring_tool,
    show_default=True,
    help="Authoring tool recorded in <asset>.",
)
@triangulate_option
@warn_as_error_option
@suppress_warning_option
def convert(
    input_file: Path,
    output: Path | None,
    comment: str | None = None,
    authoring_tool: str = ExportOptions.authoring_tool,
    triangulate_polylists: bool = False,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Weld every mesh of a DAE file into one and write it back out as DAE."""
    policy = _build_warning_policy(warn_as_error, suppress_warning)
    if output is None:
        output = _default_output(input_file)

    try:
        mesh = import_dae(
            input_file,
            options=ImportOptions(
                triangulate_polylists=triangulate_polylists, warning_policy=policy
            ),
        )
        if comment is not None:
            mesh.comment = comment
        export_dae(mesh, output, options=ExportOptions(authoring_tool=authoring_tool))
        click.echo(f"Converted: {output}")
    except DaeMeshError as e:
        raise click.ClickException(str(e))


@main.command("warnings")
def list_warnings() -> None:
    """List the warning codes accepted by --warn-as-error and --suppress-warning."""
    click.echo(describe_codes())
