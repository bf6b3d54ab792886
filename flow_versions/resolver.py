"""Project-level version resolution.

Computes, for every module of a reactor, the version each workflow step
asks for: its current (original) version, its release version, the next
development version and the hotfix version. Results are cached per session
key so that every step of one operation sees the same answer.

Resolution is non-interactive: configured defaults apply to the root module
(or to every module with auto_version_submodules) and every other module is
derived from its own current version.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from .errors import VersionResolutionError
from .graph import root_module
from .models import ModuleInfo, ReleaseContext
from .versions import bump_patch, is_snapshot, next_development_version, strip_snapshot


class ProjectVersionResolver:
    """Resolve per-module versions for one release context.

    Args:
        ctx: Release settings (defaults, auto-versioning, snapshot policy).
    """

    def __init__(self, ctx: ReleaseContext) -> None:
        self.ctx = ctx
        self._cache: dict[tuple[str, str], dict[str, str]] = {}

    def original_versions(
        self, key: str, modules: Sequence[ModuleInfo]
    ) -> dict[str, str]:
        """Current version of every module."""
        return self._cached(
            "original", key, lambda: {m.key: m.version for m in modules}
        )

    def release_versions(
        self, key: str, modules: Sequence[ModuleInfo]
    ) -> dict[str, str]:
        """Release version of every module: -SNAPSHOT removed.

        Raises:
            VersionResolutionError: If a release version is still a snapshot
                and snapshots are not allowed.
        """

        def compute() -> dict[str, str]:
            versions = self._per_module(
                modules,
                self.ctx.default_release_version,
                lambda m: strip_snapshot(m.version),
            )
            if not self.ctx.allow_snapshots:
                snapshots = sorted(k for k, v in versions.items() if is_snapshot(v))
                if snapshots:
                    raise VersionResolutionError(
                        "Release versions must not be snapshots: "
                        + ", ".join(snapshots)
                    )
            return versions

        return self._cached("release", key, compute)

    def development_versions(
        self, key: str, modules: Sequence[ModuleInfo]
    ) -> dict[str, str]:
        """Next development (snapshot) version of every module."""
        return self._cached(
            "development",
            key,
            lambda: self._per_module(
                modules,
                self.ctx.default_development_version,
                lambda m: next_development_version(m.version),
            ),
        )

    def hotfix_versions(
        self,
        key: str,
        modules: Sequence[ModuleInfo],
        last_release_versions: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Hotfix version of every module: patch bump of its last release.

        Modules without a recorded last release are bumped from their own
        release version.
        """
        last = dict(last_release_versions or {})

        def derive(module: ModuleInfo) -> str:
            return bump_patch(last.get(module.key) or strip_snapshot(module.version))

        return self._cached(
            "hotfix",
            key,
            lambda: self._per_module(modules, self.ctx.default_release_version, derive),
        )

    def _cached(
        self, kind: str, key: str, compute: Callable[[], dict[str, str]]
    ) -> dict[str, str]:
        if (kind, key) not in self._cache:
            self._cache[(kind, key)] = compute()
        return dict(self._cache[(kind, key)])

    def _per_module(
        self,
        modules: Sequence[ModuleInfo],
        default: str | None,
        derive: Callable[[ModuleInfo], str],
    ) -> dict[str, str]:
        if not modules:
            raise VersionResolutionError("Reactor has no modules")
        root = root_module(modules)

        def compute(module: ModuleInfo) -> str:
            try:
                return derive(module)
            except ValueError as exc:
                raise VersionResolutionError(
                    f"Cannot compute a version for {module.key} "
                    f"from '{module.version}': {exc}"
                ) from exc

        root_version = default or compute(root)
        versions: dict[str, str] = {}
        for module in modules:
            if module.key == root.key or self.ctx.auto_version_submodules:
                versions[module.key] = root_version
            else:
                versions[module.key] = compute(module)
        return versions
