"""CLI entry point for flow-versions."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click

from flow_versions.builder import VersionMapBuilder
from flow_versions.config import (
    config_path,
    get_flow_state,
    get_release_context,
    load_config,
)
from flow_versions.errors import FlowVersionsError
from flow_versions.graph import root_module
from flow_versions.models import FlowState, ModuleInfo
from flow_versions.pipeline import (
    check_for_release,
    check_for_snapshot,
    development_label,
    discover_reactor,
    hotfix_label,
    reactor_for_branch,
    record_pre_hotfix_versions,
    record_release_versions,
    release_label,
    update_poms_from_hotfix_snapshot_version,
    update_poms_from_release_snapshot_version,
    update_poms_with_development_version,
    update_poms_with_hotfix_snapshot_version,
    update_poms_with_hotfix_version,
    update_poms_with_previous_versions,
    update_poms_with_release_snapshot_version,
    update_poms_with_release_version,
    update_poms_with_version_copy,
)

SESSION_KEY = "cli"


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn library failures into a click error (exit code 1)."""
    try:
        yield
    except FlowVersionsError as exc:
        message = str(exc)
        if exc.__cause__ is not None:
            message = f"{message}: {exc.__cause__}"
        raise click.ClickException(message) from exc


def _load(
    project_dir: Path, overrides: dict[str, Any]
) -> tuple[VersionMapBuilder, list[ModuleInfo], FlowState]:
    doc = load_config(config_path(project_dir))
    ctx = get_release_context(doc, overrides)
    reactor = discover_reactor(project_dir)
    return VersionMapBuilder(ctx), reactor, get_flow_state(doc)


def release_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options overriding the [release] table of flow-versions.toml."""
    options = [
        click.option(
            "--suffix",
            "release_branch_version_suffix",
            default=None,
            help="Release branch version suffix (e.g. 'release').",
        ),
        click.option(
            "--consistent/--no-consistent",
            "auto_version_submodules",
            default=None,
            help="Give every module the root module's version.",
        ),
        click.option(
            "--update-dependencies/--no-update-dependencies",
            default=None,
            help="Rewrite references to reactor modules.",
        ),
        click.option(
            "--allow-snapshots/--no-allow-snapshots",
            default=None,
            help="Accept SNAPSHOT release versions.",
        ),
        click.option(
            "--release-version",
            "default_release_version",
            default=None,
            help="Release or hotfix version for the root module.",
        ),
        click.option(
            "--development-version",
            "default_development_version",
            default=None,
            help="Next development version for the root module.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="flow-versions")
@click.option(
    "--project-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory holding the root pom.xml.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log the exact pom changes.")
@click.pass_context
def cli(ctx: click.Context, project_dir: Path, verbose: bool) -> None:
    """Rewrite Maven reactor versions for git-flow releases."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING, format="%(message)s"
    )
    ctx.obj = project_dir


@cli.command()
@release_options
@click.pass_obj
def show(project_dir: Path, **overrides: Any) -> None:
    """List reactor modules and the versions the next steps would use."""
    with _reported_errors():
        builder, reactor, state = _load(project_dir, overrides)
        root = root_module(reactor)
        click.echo()
        click.echo(f"Root module:         {root.key} {root.version}")
        click.echo(
            f"Release version:     {release_label(builder, SESSION_KEY, reactor)}"
        )
        click.echo(
            f"Development version: {development_label(builder, SESSION_KEY, reactor)}"
        )
        click.echo(
            f"Hotfix version:      {hotfix_label(builder, SESSION_KEY, reactor, state)}"
        )


@cli.command()
@release_options
@click.pass_obj
def release(project_dir: Path, **overrides: Any) -> None:
    """Set release versions and remember them as the last release."""
    with _reported_errors():
        builder, reactor, _ = _load(project_dir, overrides)
        check_for_snapshot(reactor)
        update_poms_with_release_version(builder, SESSION_KEY, reactor)
        reactor = discover_reactor(project_dir)
        check_for_release(reactor)
        record_release_versions(project_dir, reactor)


@cli.command("release-start")
@click.option(
    "--label",
    default=None,
    help="Release label; defaults to the root module's release version.",
)
@release_options
@click.pass_obj
def release_start(project_dir: Path, label: str | None, **overrides: Any) -> None:
    """Set release branch working versions (<label>-<suffix>-SNAPSHOT)."""
    with _reported_errors():
        builder, reactor, _ = _load(project_dir, overrides)
        check_for_snapshot(reactor)
        label = label or release_label(builder, SESSION_KEY, reactor)
        update_poms_with_release_snapshot_version(builder, SESSION_KEY, label, reactor)
        click.echo(f"✓ Release branch versions set for {label}")


@cli.command("release-finish")
@click.option("--label", required=True, help="Release label used by release-start.")
@release_options
@click.pass_obj
def release_finish(project_dir: Path, label: str, **overrides: Any) -> None:
    """Turn release branch working versions into the final release versions."""
    with _reported_errors():
        builder, reactor, _ = _load(project_dir, overrides)
        update_poms_from_release_snapshot_version(builder, SESSION_KEY, label, reactor)
        reactor = discover_reactor(project_dir)
        check_for_release(reactor)
        record_release_versions(project_dir, reactor)
        click.echo(f"✓ Released {label}")


@cli.command()
@release_options
@click.pass_obj
def development(project_dir: Path, **overrides: Any) -> None:
    """Set the next development (SNAPSHOT) versions."""
    with _reported_errors():
        builder, reactor, _ = _load(project_dir, overrides)
        update_poms_with_development_version(builder, SESSION_KEY, reactor)


@cli.command()
@release_options
@click.pass_obj
def hotfix(project_dir: Path, **overrides: Any) -> None:
    """Set hotfix versions (patch bump of the last release)."""
    with _reported_errors():
        builder, reactor, state = _load(project_dir, overrides)
        update_poms_with_hotfix_version(builder, SESSION_KEY, reactor, state)


@cli.command("hotfix-start")
@click.option(
    "--label",
    default=None,
    help="Hotfix label; defaults to the root module's hotfix version.",
)
@release_options
@click.pass_obj
def hotfix_start(project_dir: Path, label: str | None, **overrides: Any) -> None:
    """Set hotfix branch working versions (<label>-SNAPSHOT)."""
    with _reported_errors():
        builder, reactor, state = _load(project_dir, overrides)
        label = label or hotfix_label(builder, SESSION_KEY, reactor, state)
        update_poms_with_hotfix_snapshot_version(
            builder, SESSION_KEY, label, reactor, state
        )
        click.echo(f"✓ Hotfix branch versions set for {label}")


@cli.command("hotfix-finish")
@click.option("--label", required=True, help="Hotfix label used by hotfix-start.")
@release_options
@click.pass_obj
def hotfix_finish(project_dir: Path, label: str, **overrides: Any) -> None:
    """Turn hotfix branch working versions into the final hotfix versions."""
    with _reported_errors():
        builder, reactor, _ = _load(project_dir, overrides)
        update_poms_from_hotfix_snapshot_version(builder, SESSION_KEY, label, reactor)
        reactor = discover_reactor(project_dir)
        check_for_release(reactor)
        record_release_versions(project_dir, reactor)
        click.echo(f"✓ Released hotfix {label}")


@cli.command("remember-versions")
@click.pass_obj
def remember_versions(project_dir: Path) -> None:
    """Record the current versions so restore can bring them back after a hotfix."""
    with _reported_errors():
        reactor = discover_reactor(project_dir)
        record_pre_hotfix_versions(project_dir, reactor)
        click.echo(f"✓ Recorded versions of {len(reactor)} modules")


@cli.command()
@release_options
@click.pass_obj
def restore(project_dir: Path, **overrides: Any) -> None:
    """Restore the versions recorded before a hotfix (or development versions)."""
    with _reported_errors():
        builder, reactor, state = _load(project_dir, overrides)
        update_poms_with_previous_versions(builder, SESSION_KEY, reactor, state)


@cli.command("copy-versions")
@click.option("--from-branch", required=True, help="Branch whose versions are copied.")
@click.option("--seed", type=int, default=None, help="Seed for session keys.")
@release_options
@click.pass_obj
def copy_versions(
    project_dir: Path, from_branch: str, seed: int | None, **overrides: Any
) -> None:
    """Give the checked-out modules the versions they carry on another branch."""
    with _reported_errors():
        builder, reactor, _ = _load(project_dir, overrides)
        source = reactor_for_branch(from_branch, project_dir)
        update_poms_with_version_copy(builder, reactor, source, random.Random(seed))
