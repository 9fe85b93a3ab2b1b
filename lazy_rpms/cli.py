"""CLI entry point for lazy-rpms."""

from __future__ import annotations

import json
from pathlib import Path

import click

from lazy_rpms.config import load_config, split_list
from lazy_rpms.errors import PlannerError
from lazy_rpms.outputs import build_matrix, spec_list, write_outputs
from lazy_rpms.pipeline import plan
from lazy_rpms.specfile import package_name, read_build_deps


@click.group()
@click.version_option(package_name="lazy-rpms")
def cli() -> None:
    """Lazy RPM build planner — only rebuilds what changed."""


@cli.command("plan")
@click.option(
    "--workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    envvar="GITHUB_WORKSPACE",
    help="Repository root. Defaults to the current directory.",
)
@click.option(
    "--paths",
    multiple=True,
    envvar="INPUT_PATHS",
    help="Directories to search for specs (repeatable, or comma separated).",
)
@click.option(
    "--recursive/--no-recursive",
    default=None,
    envvar="INPUT_RECURSIVE",
    help="Search subdirectories of each path.",
)
@click.option(
    "--force/--no-force",
    default=None,
    envvar="INPUT_FORCE",
    help="Rebuild every spec regardless of recorded builds.",
)
@click.option(
    "--bundle/--no-bundle",
    default=None,
    envvar="INPUT_BUNDLE",
    help="Group specs into ordered build bundles.",
)
@click.option("--sdb-domain", envvar="INPUT_SDB-DOMAIN", help="SimpleDB domain.")
@click.option("--region", envvar="AWS_REGION", help="AWS region of the domain.")
@click.option(
    "--repository", envvar="GITHUB_REPOSITORY", help="Repository as owner/name."
)
@click.option("--ref", envvar="GITHUB_REF", help="Git ref the build records belong to.")
@click.option(
    "--scheme",
    type=click.Choice(["commit", "timestamp"]),
    default=None,
    help="Compare build records by commit hash or by timestamp.",
)
@click.option(
    "--max-workers", type=click.IntRange(min=1), default=None, help="Parallel lookups."
)
@click.option(
    "--github-output",
    type=click.Path(dir_okay=False),
    envvar="GITHUB_OUTPUT",
    help="File to append the list and matrix step outputs to.",
)
def plan_cmd(
    workspace: Path | None,
    paths: tuple[str, ...],
    recursive: bool | None,
    force: bool | None,
    bundle: bool | None,
    sdb_domain: str | None,
    region: str | None,
    repository: str | None,
    ref: str | None,
    scheme: str | None,
    max_workers: int | None,
    github_output: str | None,
) -> None:
    """Find specs that need building and print the build matrix."""
    root = (workspace or Path.cwd()).resolve()
    overrides = {
        "paths": split_list(paths) or None,
        "recursive": recursive,
        "force": force,
        "bundle": bundle,
        "sdb_domain": sdb_domain,
        "region": region,
        "repository": repository,
        "ref": ref,
        "scheme": scheme,
        "max_workers": max_workers,
    }

    try:
        config = load_config(root, overrides)
        result = plan(config)
    except PlannerError as exc:
        raise click.ClickException(str(exc)) from exc

    matrix = build_matrix(result, config.bundle)
    click.echo(f"\nSpec list: {spec_list(result)}")
    click.echo(f"Matrix: {json.dumps(matrix, indent=2)}")

    if github_output:
        write_outputs(github_output, result, config.bundle)


@cli.command()
@click.argument(
    "specs", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False)
)
def deps(specs: tuple[str, ...]) -> None:
    """Show the package name and build dependencies of spec files."""
    for spec in specs:
        try:
            build_deps = read_build_deps(Path(spec))
        except PlannerError as exc:
            raise click.ClickException(str(exc)) from exc
        name = package_name(Path(spec).as_posix())
        click.echo(f"{name}: {', '.join(build_deps) or '<none>'}")
