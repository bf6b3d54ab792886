"""Version plans for each workflow operation.

A VersionPlan pairs the versions a reactor currently carries (original) with
the versions an operation moves it to (target), and says whether the SCM tag
should point at HEAD instead of a release tag. The pipeline turns a plan
into one changeset per module.

Branch snapshot conversions are targeted: only modules whose version equals
the label take part, everything else passes through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .models import ModuleInfo, ReleaseContext
from .resolver import ProjectVersionResolver
from .version_map import VersionMap
from .versions import branch_suffix, from_branch_snapshot, to_branch_snapshot


@dataclass(frozen=True)
class VersionPlan:
    """Original and target version maps for one operation.

    Attributes:
        original: Versions the modules carry now.
        target: Versions the modules should carry afterwards.
        head_tag: Point <scm><tag> at HEAD instead of rendering a release tag.
        purpose: Short noun phrase for messages ("release versions").
    """

    original: VersionMap
    target: VersionMap
    head_tag: bool = False
    purpose: str = "versions"


class VersionMapBuilder:
    """Compute VersionPlans from a resolver and the release settings.

    Maps are consistent when the context auto-versions submodules, since
    every module then shares the root's version.
    """

    def __init__(
        self, ctx: ReleaseContext, resolver: ProjectVersionResolver | None = None
    ) -> None:
        self.ctx = ctx
        self.resolver = resolver or ProjectVersionResolver(ctx)

    @property
    def consistent(self) -> bool:
        return self.ctx.auto_version_submodules

    @property
    def release_suffix(self) -> str:
        return branch_suffix(self.ctx.release_branch_version_suffix)

    def _map(self, versions: Mapping[str, str]) -> VersionMap:
        return VersionMap(versions, consistent=self.consistent)

    def _original(self, key: str, modules: Sequence[ModuleInfo]) -> VersionMap:
        return self._map(self.resolver.original_versions(key, modules))

    def release(self, key: str, modules: Sequence[ModuleInfo]) -> VersionPlan:
        """Move every module to its release version."""
        return VersionPlan(
            original=self._original(key, modules),
            target=self._map(self.resolver.release_versions(key, modules)),
            purpose="release versions",
        )

    def release_branch_snapshot(
        self, key: str, label: str, modules: Sequence[ModuleInfo]
    ) -> VersionPlan:
        """Working versions for a release branch: label → label-<suffix>-SNAPSHOT."""
        releases = self.resolver.release_versions(key, modules)
        return VersionPlan(
            original=self._original(key, modules),
            target=self._map(to_branch_snapshot(releases, label, self.release_suffix)),
            head_tag=True,
            purpose="release versions",
        )

    def release_from_branch_snapshot(
        self, key: str, label: str, modules: Sequence[ModuleInfo]
    ) -> VersionPlan:
        """Finish a release branch: label-<suffix>-SNAPSHOT → label."""
        original = self.resolver.original_versions(key, modules)
        return VersionPlan(
            original=self._map(original),
            target=self._map(
                from_branch_snapshot(original, label, self.release_suffix)
            ),
            purpose="release versions",
        )

    def hotfix(
        self,
        key: str,
        modules: Sequence[ModuleInfo],
        last_release_versions: Mapping[str, str] | None = None,
    ) -> VersionPlan:
        """Move every module to its hotfix version."""
        hotfixes = self.resolver.hotfix_versions(key, modules, last_release_versions)
        return VersionPlan(
            original=self._original(key, modules),
            target=self._map(hotfixes),
            purpose="hotfix versions",
        )

    def hotfix_branch_snapshot(
        self,
        key: str,
        label: str,
        modules: Sequence[ModuleInfo],
        last_release_versions: Mapping[str, str] | None = None,
    ) -> VersionPlan:
        """Working versions for a hotfix branch: label → label-SNAPSHOT."""
        hotfixes = self.resolver.hotfix_versions(key, modules, last_release_versions)
        return VersionPlan(
            original=self._original(key, modules),
            target=self._map(to_branch_snapshot(hotfixes, label)),
            head_tag=True,
            purpose="hotfix versions",
        )

    def hotfix_from_branch_snapshot(
        self, key: str, label: str, modules: Sequence[ModuleInfo]
    ) -> VersionPlan:
        """Finish a hotfix branch: label-SNAPSHOT → label."""
        original = self.resolver.original_versions(key, modules)
        return VersionPlan(
            original=self._map(original),
            target=self._map(from_branch_snapshot(original, label)),
            purpose="hotfix versions",
        )

    def development(self, key: str, modules: Sequence[ModuleInfo]) -> VersionPlan:
        """Move every module to its next development version."""
        return VersionPlan(
            original=self._original(key, modules),
            target=self._map(self.resolver.development_versions(key, modules)),
            head_tag=True,
            purpose="development versions",
        )

    def previous_versions(
        self,
        key: str,
        modules: Sequence[ModuleInfo],
        pre_hotfix_versions: Mapping[str, str] | None,
    ) -> VersionPlan:
        """Restore the versions recorded before a hotfix started.

        Without a recorded map this falls back to the development plan.
        """
        if not pre_hotfix_versions:
            return self.development(key, modules)
        return VersionPlan(
            original=self._original(key, modules),
            target=self._map(pre_hotfix_versions),
            purpose="development versions",
        )

    def version_copy(
        self,
        update_key: str,
        modules_to_update: Sequence[ModuleInfo],
        source_key: str,
        modules_with_versions: Sequence[ModuleInfo],
    ) -> VersionPlan:
        """Give modules the current versions of another reactor snapshot.

        Used to carry versions across branches, e.g. to keep develop's
        versions when merging a release branch back.
        """
        return VersionPlan(
            original=self._original(update_key, modules_to_update),
            target=self._original(source_key, modules_with_versions),
            purpose="copied versions",
        )

