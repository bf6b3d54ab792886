"""Tests for flow_versions.models."""

from __future__ import annotations

from flow_versions.models import (
    ChangeResult,
    FlowState,
    ModuleInfo,
    ReleaseContext,
    VersionBump,
)


class TestModuleInfo:
    def test_create_with_required_fields(self) -> None:
        module = ModuleInfo(group_id="com.example", artifact_id="app", version="1.0")
        assert module.key == "com.example:app"
        assert module.deps == []
        assert module.parent_key is None

    def test_display_name_falls_back_to_artifact_id(self) -> None:
        module = ModuleInfo(group_id="g", artifact_id="app", version="1.0")
        assert module.display_name == "app"
        named = ModuleInfo(group_id="g", artifact_id="app", version="1.0", name="App")
        assert named.display_name == "App"


class TestVersionBump:
    def test_create(self) -> None:
        bump = VersionBump(old="1.0-SNAPSHOT", new="1.0")
        assert bump.old == "1.0-SNAPSHOT"
        assert bump.new == "1.0"


class TestReleaseContext:
    def test_defaults(self) -> None:
        ctx = ReleaseContext()
        assert ctx.release_branch_version_suffix == "release"
        assert ctx.update_dependencies is True
        assert ctx.auto_version_submodules is False
        assert ctx.allow_snapshots is False
        assert ctx.scm_tag_template == "${version}"

    def test_only_settings_the_rewrite_uses(self) -> None:
        """Tag creation happens outside this tool, so it has no settings here."""
        assert set(ReleaseContext.model_fields) == {
            "release_branch_version_suffix",
            "update_dependencies",
            "auto_version_submodules",
            "allow_snapshots",
            "default_release_version",
            "default_development_version",
            "scm_tag_template",
        }

    def test_accepts_dashed_names(self) -> None:
        ctx = ReleaseContext.model_validate(
            {"auto-version-submodules": True, "release-branch-version-suffix": "rc"}
        )
        assert ctx.auto_version_submodules is True
        assert ctx.release_branch_version_suffix == "rc"

    def test_accepts_field_names(self) -> None:
        ctx = ReleaseContext(update_dependencies=False)
        assert ctx.update_dependencies is False


class TestFlowState:
    def test_empty_by_default(self) -> None:
        state = FlowState()
        assert state.last_release_versions == {}
        assert state.pre_hotfix_versions == {}

    def test_dashed_names(self) -> None:
        state = FlowState.model_validate({"last-release-versions": {"g:a": "1.0"}})
        assert state.last_release_versions == {"g:a": "1.0"}


class TestChangeResult:
    def test_describe_without_log(self) -> None:
        assert ChangeResult(title="Update SCM Tag").describe() == "[Update SCM Tag]"

    def test_describe_with_log(self) -> None:
        result = ChangeResult(title="Update Project Version", log=["one", "two"])
        assert result.describe() == "[Update Project Version]\n - one\n - two"
