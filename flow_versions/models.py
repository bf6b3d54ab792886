"""Data models for flow-versions.

These Pydantic models represent the core data structures used throughout
the release pipeline.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .versions import module_key


class ModuleInfo(BaseModel):
    """Metadata for a single module in the Maven reactor.

    Attributes:
        group_id: Maven groupId (inherited from the parent if not declared).
        artifact_id: Maven artifactId.
        version: Current version string (inherited from the parent if not
                 declared).
        name: Human-readable <name>, falling back to the artifactId.
        path: Path to the module's pom.xml.
        parent_key: "group:artifact" key of the declared <parent>, if any.
                    The parent may live outside the reactor.
        deps: Keys of other reactor modules this module references (parent,
              dependencies, plugins). External references are not tracked.
    """

    group_id: str
    artifact_id: str
    version: str
    name: str = ""
    path: str = ""
    parent_key: str | None = None
    deps: list[str] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return module_key(self.group_id, self.artifact_id)

    @property
    def display_name(self) -> str:
        return self.name or self.artifact_id


class VersionBump(BaseModel):
    """Records a version change for a module.

    Used to summarize what a pom update did so the operator sees the
    transitions without debug logging.

    Attributes:
        old: The version before the update.
        new: The version after the update.
    """

    old: str
    new: str


class ReleaseContext(BaseModel):
    """Settings for one release workflow run.

    Defaults mirror the behaviour users expect from git-flow releases:
    release branches carry a "-release-SNAPSHOT" working version and
    internal dependency versions are rewritten along with the modules.

    Attributes:
        release_branch_version_suffix: Inserted before -SNAPSHOT on release
            branches. Blank disables it.
        update_dependencies: Rewrite references to reactor modules.
        auto_version_submodules: Give every module the root's version. Maps
            built in this mode are consistent.
        allow_snapshots: Accept release versions that still end in -SNAPSHOT.
        default_release_version: Release (and hotfix) version for the root.
        default_development_version: Next development version for the root.
        scm_tag_template: Rendered into <scm><tag>; supports ${version} and
            ${artifactId}.
    """

    model_config = ConfigDict(populate_by_name=True)

    release_branch_version_suffix: str = Field(
        default="release", alias="release-branch-version-suffix"
    )
    update_dependencies: bool = Field(default=True, alias="update-dependencies")
    auto_version_submodules: bool = Field(
        default=False, alias="auto-version-submodules"
    )
    allow_snapshots: bool = Field(default=False, alias="allow-snapshots")
    default_release_version: str | None = Field(
        default=None, alias="default-release-version"
    )
    default_development_version: str | None = Field(
        default=None, alias="default-development-version"
    )
    scm_tag_template: str = Field(default="${version}", alias="scm-tag-template")


class FlowState(BaseModel):
    """Version maps remembered between workflow steps.

    Attributes:
        last_release_versions: Versions of the last finished release, the
            baseline for hotfix versions.
        pre_hotfix_versions: Development versions in place before a hotfix
            started, restored once the hotfix is finished.
    """

    model_config = ConfigDict(populate_by_name=True)

    last_release_versions: dict[str, str] = Field(
        default_factory=dict, alias="last-release-versions"
    )
    pre_hotfix_versions: dict[str, str] = Field(
        default_factory=dict, alias="pre-hotfix-versions"
    )


class ChangeResult(BaseModel):
    """Outcome of applying one change to one module's document.

    Attributes:
        title: Name of the change, used in log output.
        modified: Whether the document was mutated.
        log: Descriptions of what was done, in order. Diagnostic only.
    """

    title: str
    modified: bool = False
    log: list[str] = Field(default_factory=list)

    def describe(self) -> str:
        """Render as "[title]" or "[title]\\n - entry\\n - entry"."""
        if not self.log:
            return f"[{self.title}]"
        return f"[{self.title}]\n - " + "\n - ".join(self.log)
