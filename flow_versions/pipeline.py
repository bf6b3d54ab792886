"""Release pipeline: discover → plan → rewrite poms → remember versions.

This module orchestrates the version side of a git-flow release:
1. Discover all modules of the Maven reactor
2. Check that the reactor is in the expected (snapshot or release) state
3. Build a version plan for the workflow step (release, hotfix, ...)
4. Rewrite every module's pom.xml with a fresh changeset
5. Remember release and pre-hotfix versions for later steps

Branch creation, merging and builds happen elsewhere; the functions here
run against whatever branch is checked out, and reactor_for_branch() reads
the reactor of another branch.
"""

from __future__ import annotations

import logging
import random
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from .builder import VersionMapBuilder, VersionPlan
from .changes import (
    DependencyVersionChange,
    ParentVersionChange,
    ScmHeadTagChange,
    ScmTagChange,
    SelfVersionChange,
)
from .changeset import Changeset, ChangesetResult
from .config import config_path, load_config, save_config, set_state_versions
from .errors import ConfigError, ReleaseError, RewriteError
from .graph import root_module, topo_sort
from .models import FlowState, ModuleInfo, ReleaseContext, VersionBump
from .pom import (
    child_text,
    get_module_dirs,
    get_parent_key,
    get_project_coordinates,
    iter_artifact_references,
    load_pom,
    namespace_of,
    reference_key,
)
from .rewriter import apply_changes
from .shell import current_branch, git, step
from .versions import is_snapshot

logger = logging.getLogger(__name__)


def discover_reactor(project_dir: Path | None = None) -> list[ModuleInfo]:
    """Scan the project and discover all reactor modules.

    Starts at the root pom.xml and follows <modules> recursively, then
    records which reactor modules each module references (parent,
    dependencies, plugins).

    Returns:
        Modules in reactor order: parents and referenced modules first.

    Raises:
        ConfigError: If a pom is missing, malformed or declared twice, or if
            modules reference each other in a cycle.
    """
    step("Discovering reactor modules")

    root_dir = project_dir or Path.cwd()
    pending = [root_dir / "pom.xml"]
    modules: dict[str, ModuleInfo] = {}
    raw_refs: dict[str, list[str]] = {}

    # First pass: collect coordinates from each pom
    while pending:
        pom_path = pending.pop(0)
        root = load_pom(pom_path).getroot()
        ns = namespace_of(root)
        try:
            group_id, artifact_id, version = get_project_coordinates(root, ns)
            parent_key = get_parent_key(root, ns)
        except ConfigError as exc:
            raise ConfigError(f"{pom_path}: {exc}") from exc

        module = ModuleInfo(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            name=child_text(root, "name", ns) or artifact_id,
            path=str(pom_path),
            parent_key=parent_key,
        )
        if module.key in modules:
            raise ConfigError(f"Module {module.key} is declared twice ({pom_path})")
        modules[module.key] = module

        refs = [parent_key] if parent_key else []
        refs.extend(
            key
            for key in (
                reference_key(ref, ns, group_id)
                for ref in iter_artifact_references(root, ns, managed=False)
            )
            if key is not None
        )
        raw_refs[module.key] = refs

        for module_dir in get_module_dirs(root, ns):
            child = pom_path.parent / module_dir
            pending.append(child if child.suffix == ".xml" else child / "pom.xml")

    # Second pass: keep only references to reactor modules
    for key, refs in raw_refs.items():
        for ref in refs:
            if ref in modules and ref != key and ref not in modules[key].deps:
                modules[key].deps.append(ref)

    try:
        order = topo_sort(modules)
    except RuntimeError as exc:
        raise ConfigError("Reactor modules reference each other") from exc

    for key in order:
        info = modules[key]
        deps = f" → [{', '.join(info.deps)}]" if info.deps else ""
        print(f"  {key} {info.version}{deps}")

    return [modules[key] for key in order]


def reactor_for_branch(
    branch: str, project_dir: Path | None = None
) -> list[ModuleInfo]:
    """Read the reactor as it exists on another branch.

    Checks out the branch, discovers its modules, and checks the original
    branch out again.

    Raises:
        ReleaseError: If git cannot report or switch branches.
    """
    try:
        original = current_branch(project_dir)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise ReleaseError("Cannot determine the current branch") from exc
    _checkout(branch, project_dir)
    try:
        return discover_reactor(project_dir)
    finally:
        _checkout(original, project_dir)


def _checkout(branch: str, project_dir: Path | None) -> None:
    try:
        git("checkout", branch, cwd=project_dir)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise ReleaseError(f"Cannot check out branch {branch}") from exc


def random_name(base: str, rng: random.Random) -> str:
    """Derive a unique session key from base using the caller's random source."""
    return f"{base}{rng.getrandbits(63)}"


def release_label(
    builder: VersionMapBuilder, key: str, reactor: Sequence[ModuleInfo]
) -> str:
    """Release version of the root module."""
    versions = builder.resolver.release_versions(key, reactor)
    return versions[root_module(reactor).key]


def hotfix_label(
    builder: VersionMapBuilder,
    key: str,
    reactor: Sequence[ModuleInfo],
    state: FlowState,
) -> str:
    """Hotfix version of the root module."""
    versions = builder.resolver.hotfix_versions(
        key, reactor, state.last_release_versions
    )
    return versions[root_module(reactor).key]


def development_label(
    builder: VersionMapBuilder, key: str, reactor: Sequence[ModuleInfo]
) -> str:
    """Next development version of the root module."""
    versions = builder.resolver.development_versions(key, reactor)
    return versions[root_module(reactor).key]


def check_for_snapshot(reactor: Sequence[ModuleInfo]) -> None:
    """Require at least one SNAPSHOT module before starting a release.

    Raises:
        ReleaseError: If every module already carries a release version.
    """
    print("Checking for SNAPSHOT version in modules...")
    if not any(is_snapshot(m.version) for m in reactor):
        raise ReleaseError("Unable to find SNAPSHOT version in reactor modules!")


def check_for_release(reactor: Sequence[ModuleInfo]) -> None:
    """Require release versions everywhere before finishing a release.

    Raises:
        ReleaseError: If any module still carries a SNAPSHOT version.
    """
    print("Checking for release version in modules...")
    snapshots = [m.key for m in reactor if is_snapshot(m.version)]
    if snapshots:
        raise ReleaseError(
            "Some reactor modules contain SNAPSHOT versions: " + ", ".join(snapshots)
        )


def build_changeset(plan: VersionPlan, ctx: ReleaseContext) -> Changeset:
    """Assemble the changes for one module: parent, self, dependencies, SCM tag."""
    changes = (
        Changeset()
        .with_change(ParentVersionChange(plan.original, plan.target))
        .with_change(SelfVersionChange(plan.target))
        .with_change(
            DependencyVersionChange(
                plan.original, plan.target, ctx.update_dependencies
            )
        )
    )
    if plan.head_tag:
        return changes.with_change(ScmHeadTagChange(plan.target))
    return changes.with_change(
        ScmTagChange(plan.target, tag_template=ctx.scm_tag_template)
    )


def log_changes(outcome: ChangesetResult) -> None:
    """Emit the change descriptions of one module at DEBUG level."""
    if logger.isEnabledFor(logging.DEBUG):
        for desc in outcome.descriptions():
            logger.debug("  %s", desc)


def summarize_bumps(
    plan: VersionPlan, reactor: Sequence[ModuleInfo]
) -> dict[str, VersionBump]:
    """Modules whose version the plan changes, with old and new versions."""
    bumps: dict[str, VersionBump] = {}
    for module in reactor:
        new = plan.target.resolve(module.key)
        if new is not None and new != module.version:
            bumps[module.key] = VersionBump(old=module.version, new=new)
    return bumps


def update_poms(
    plan: VersionPlan, reactor: Sequence[ModuleInfo], ctx: ReleaseContext
) -> list[ChangesetResult]:
    """Rewrite every module's pom.xml according to a version plan.

    Each module gets a fresh changeset. Poms are written one by one, so a
    failure leaves the modules before it already rewritten.

    Raises:
        ReleaseError: Wrapping the RewriteError of the first failing module.
    """
    step(f"Updating poms with {plan.purpose}")
    if not logger.isEnabledFor(logging.DEBUG):
        print("  rerun with --verbose to see exact changes")

    outcomes: list[ChangesetResult] = []
    for module in reactor:
        print(f"  updating pom for {module.display_name}...")
        try:
            outcome = apply_changes(module, build_changeset(plan, ctx))
        except RewriteError as exc:
            raise ReleaseError(f"Error updating poms with {plan.purpose}") from exc
        log_changes(outcome)
        outcomes.append(outcome)

    for key, bump in summarize_bumps(plan, reactor).items():
        print(f"  {key}: {bump.old} → {bump.new}")
    return outcomes


def update_poms_with_release_version(
    builder: VersionMapBuilder, key: str, reactor: Sequence[ModuleInfo]
) -> list[ChangesetResult]:
    return update_poms(builder.release(key, reactor), reactor, builder.ctx)


def update_poms_with_release_snapshot_version(
    builder: VersionMapBuilder, key: str, label: str, reactor: Sequence[ModuleInfo]
) -> list[ChangesetResult]:
    plan = builder.release_branch_snapshot(key, label, reactor)
    return update_poms(plan, reactor, builder.ctx)


def update_poms_from_release_snapshot_version(
    builder: VersionMapBuilder, key: str, label: str, reactor: Sequence[ModuleInfo]
) -> list[ChangesetResult]:
    plan = builder.release_from_branch_snapshot(key, label, reactor)
    return update_poms(plan, reactor, builder.ctx)


def update_poms_with_hotfix_version(
    builder: VersionMapBuilder,
    key: str,
    reactor: Sequence[ModuleInfo],
    state: FlowState,
) -> list[ChangesetResult]:
    plan = builder.hotfix(key, reactor, state.last_release_versions)
    return update_poms(plan, reactor, builder.ctx)


def update_poms_with_hotfix_snapshot_version(
    builder: VersionMapBuilder,
    key: str,
    label: str,
    reactor: Sequence[ModuleInfo],
    state: FlowState,
) -> list[ChangesetResult]:
    plan = builder.hotfix_branch_snapshot(
        key, label, reactor, state.last_release_versions
    )
    return update_poms(plan, reactor, builder.ctx)


def update_poms_from_hotfix_snapshot_version(
    builder: VersionMapBuilder, key: str, label: str, reactor: Sequence[ModuleInfo]
) -> list[ChangesetResult]:
    plan = builder.hotfix_from_branch_snapshot(key, label, reactor)
    return update_poms(plan, reactor, builder.ctx)


def update_poms_with_development_version(
    builder: VersionMapBuilder, key: str, reactor: Sequence[ModuleInfo]
) -> list[ChangesetResult]:
    return update_poms(builder.development(key, reactor), reactor, builder.ctx)


def update_poms_with_previous_versions(
    builder: VersionMapBuilder,
    key: str,
    reactor: Sequence[ModuleInfo],
    state: FlowState,
) -> list[ChangesetResult]:
    """Restore pre-hotfix versions, or development versions if none were recorded."""
    if not state.pre_hotfix_versions:
        logger.info("no pre-hotfix versions recorded, using development versions")
    plan = builder.previous_versions(key, reactor, state.pre_hotfix_versions)
    return update_poms(plan, reactor, builder.ctx)


def update_poms_with_version_copy(
    builder: VersionMapBuilder,
    modules_to_update: Sequence[ModuleInfo],
    modules_with_versions: Sequence[ModuleInfo],
    rng: random.Random,
) -> list[ChangesetResult]:
    """Give modules_to_update the current versions of modules_with_versions."""
    plan = builder.version_copy(
        random_name("copy", rng),
        modules_to_update,
        random_name("copy", rng),
        modules_with_versions,
    )
    return update_poms(plan, modules_to_update, builder.ctx)


def record_versions(project_dir: Path, name: str, versions: Mapping[str, str]) -> None:
    """Store a version map in the [state] table of flow-versions.toml."""
    path = config_path(project_dir)
    doc = load_config(path)
    set_state_versions(doc, name, versions)
    save_config(path, doc)


def record_release_versions(
    project_dir: Path, reactor: Sequence[ModuleInfo]
) -> None:
    """Remember the reactor's current versions as the last release."""
    record_versions(
        project_dir, "last-release-versions", {m.key: m.version for m in reactor}
    )


def record_pre_hotfix_versions(
    project_dir: Path, reactor: Sequence[ModuleInfo]
) -> None:
    """Remember the reactor's current versions before a hotfix rewrites them."""
    record_versions(
        project_dir, "pre-hotfix-versions", {m.key: m.version for m in reactor}
    )
