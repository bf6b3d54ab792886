"""Tests for flow_versions.resolver."""

from __future__ import annotations

import pytest

from flow_versions.errors import VersionResolutionError
from flow_versions.models import ModuleInfo, ReleaseContext
from flow_versions.resolver import ProjectVersionResolver

PARENT = "com.example:parent"
CORE = "com.example:core"
APP = "com.example:app"


class TestOriginalVersions:
    def test_current_versions(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        assert resolver.original_versions("s", reactor_modules) == {
            PARENT: "1.0-SNAPSHOT",
            CORE: "1.0-SNAPSHOT",
            APP: "1.0-SNAPSHOT",
        }

    def test_cached_per_session_key(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        first = resolver.original_versions("s", reactor_modules)

        changed = [m.model_copy(update={"version": "9.9"}) for m in reactor_modules]
        assert resolver.original_versions("s", changed) == first
        assert resolver.original_versions("other", changed)[APP] == "9.9"

    def test_returns_copies(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        resolver.original_versions("s", reactor_modules)[APP] = "mutated"
        assert resolver.original_versions("s", reactor_modules)[APP] == "1.0-SNAPSHOT"


class TestReleaseVersions:
    def test_strips_snapshot(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        assert set(resolver.release_versions("s", reactor_modules).values()) == {"1.0"}

    def test_default_applies_to_root_only(
        self, reactor_modules: list[ModuleInfo]
    ) -> None:
        resolver = ProjectVersionResolver(ReleaseContext(default_release_version="2.0"))
        versions = resolver.release_versions("s", reactor_modules)
        assert versions == {PARENT: "2.0", CORE: "1.0", APP: "1.0"}

    def test_auto_version_submodules(self, reactor_modules: list[ModuleInfo]) -> None:
        ctx = ReleaseContext(default_release_version="2.0", auto_version_submodules=True)
        versions = ProjectVersionResolver(ctx).release_versions("s", reactor_modules)
        assert versions == {PARENT: "2.0", CORE: "2.0", APP: "2.0"}

    def test_snapshot_default_rejected(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(
            ReleaseContext(default_release_version="2.0-SNAPSHOT")
        )
        with pytest.raises(VersionResolutionError, match=PARENT):
            resolver.release_versions("s", reactor_modules)

    def test_snapshot_default_allowed(self, reactor_modules: list[ModuleInfo]) -> None:
        ctx = ReleaseContext(default_release_version="2.0-SNAPSHOT", allow_snapshots=True)
        versions = ProjectVersionResolver(ctx).release_versions("s", reactor_modules)
        assert versions[PARENT] == "2.0-SNAPSHOT"

    def test_empty_reactor(self) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        with pytest.raises(VersionResolutionError):
            resolver.release_versions("s", [])


class TestDevelopmentVersions:
    def test_next_snapshot(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        versions = resolver.development_versions("s", reactor_modules)
        assert set(versions.values()) == {"1.0.1-SNAPSHOT"}

    def test_default(self, reactor_modules: list[ModuleInfo]) -> None:
        ctx = ReleaseContext(default_development_version="1.1-SNAPSHOT")
        versions = ProjectVersionResolver(ctx).development_versions("s", reactor_modules)
        assert versions[PARENT] == "1.1-SNAPSHOT"
        assert versions[APP] == "1.0.1-SNAPSHOT"

    def test_unparseable_version(self) -> None:
        modules = [ModuleInfo(group_id="g", artifact_id="a", version="1.0.Final")]
        resolver = ProjectVersionResolver(ReleaseContext())
        with pytest.raises(VersionResolutionError, match="g:a"):
            resolver.development_versions("s", modules)


class TestHotfixVersions:
    def test_bumps_last_release(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        versions = resolver.hotfix_versions(
            "s", reactor_modules, {PARENT: "1.2", CORE: "1.2", APP: "1.3.4"}
        )
        assert versions == {PARENT: "1.2.1", CORE: "1.2.1", APP: "1.3.5"}

    def test_without_last_release(self, reactor_modules: list[ModuleInfo]) -> None:
        resolver = ProjectVersionResolver(ReleaseContext())
        versions = resolver.hotfix_versions("s", reactor_modules)
        assert set(versions.values()) == {"1.0.1"}

    def test_default_release_version_for_root(
        self, reactor_modules: list[ModuleInfo]
    ) -> None:
        ctx = ReleaseContext(default_release_version="1.0.7")
        versions = ProjectVersionResolver(ctx).hotfix_versions("s", reactor_modules)
        assert versions[PARENT] == "1.0.7"
        assert versions[CORE] == "1.0.1"
